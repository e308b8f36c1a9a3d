#!/usr/bin/env python3
"""
Tests for GUI state handling: render hand-off, clearing and drag reordering.
Widgets are replaced by small recorders so no display is needed.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(__file__))

import logging
from types import SimpleNamespace

import pytest
from PIL import Image

pytest.importorskip("tkinter")

from spritepacker_core import AtlasConfig, ImageEntry, SortMethod
from spritepacker_core.gui import SpritePackerGUI
from spritepacker_core.session import AtlasSession


def make_entry(name):
    return ImageEntry(f"/sprites/{name}.png", name, 16, 16)


class FakeButton:
    def __init__(self):
        self.state = 'disabled'

    def config(self, **options):
        self.state = options.get('state', self.state)


class FakeCanvas:
    def __init__(self):
        self.items = {"atlas"}

    def delete(self, *tags):
        self.items.difference_update(tags)


class FakeTree:
    """Rows follow the session order, 20 pixels per row."""

    def __init__(self, session):
        self.session = session
        self.selected = None
        self.cursor = ""

    def identify_row(self, y):
        identifiers = self.session.identifiers
        row = y // 20
        return identifiers[row] if 0 <= row < len(identifiers) else ""

    def index(self, iid):
        return self.session.identifiers.index(iid)

    def selection_set(self, iid):
        self.selected = iid

    def configure(self, **options):
        self.cursor = options.get('cursor', self.cursor)


class FakeVar:
    def __init__(self, value=""):
        self.value = value

    def set(self, value):
        self.value = value

    def get(self):
        return self.value


@pytest.fixture
def gui():
    app = SpritePackerGUI.__new__(SpritePackerGUI)
    app.logger = logging.getLogger("test_gui_state")
    app.session = AtlasSession(AtlasConfig(64, 64, 0))
    app.session.entries = [make_entry("a"), make_entry("b"), make_entry("c")]
    app.atlas_image = None
    app._preview_photo = None
    app._drag_source = None
    app.save_atlas_button = FakeButton()
    app.preview_canvas = FakeCanvas()
    app.file_tree = FakeTree(app.session)
    app.sort_var = FakeVar(SortMethod.NAME_ASC.label)
    app.packing_info_var = FakeVar()
    app.progress_calls = []
    app._start_progress = lambda message: app.progress_calls.append("start")
    app._stop_progress = lambda: app.progress_calls.append("stop")
    app._show_preview = lambda: None
    app._refresh_file_list = lambda: None
    app.repacks = 0

    def count_update():
        app.repacks += 1
    app._update_atlas = count_update
    return app


# Render hand-off

def test_outdated_render_is_ignored(gui):
    older = gui.session.repack()
    newer = gui.session.repack()
    old_atlas = Image.new('RGBA', (64, 64))
    new_atlas = Image.new('RGBA', (64, 64))

    gui._render_complete(older, old_atlas)
    assert gui.atlas_image is None
    assert gui.save_atlas_button.state == 'disabled'

    gui._render_complete(newer, new_atlas)
    assert gui.atlas_image is new_atlas
    assert gui.save_atlas_button.state == 'normal'

    # An older render finishing late does not replace the current preview
    gui._render_complete(older, old_atlas)
    assert gui.atlas_image is new_atlas


# Clearing

def test_removing_last_image_clears_preview(gui):
    result = gui.session.repack()
    gui._render_complete(result, Image.new('RGBA', (64, 64)))
    assert gui.save_atlas_button.state == 'normal'

    gui.session.entries = []
    SpritePackerGUI._update_atlas(gui)

    assert gui.atlas_image is None
    assert gui._preview_photo is None
    assert "atlas" not in gui.preview_canvas.items
    assert gui.save_atlas_button.state == 'disabled'
    assert gui.session.last_result is None

    # A render started before the clear is dropped
    gui._render_complete(result, Image.new('RGBA', (64, 64)))
    assert gui.atlas_image is None


# Drag and drop reordering

def test_drop_moves_entry_to_target_row(gui):
    gui._drop_on("/sprites/a.png", "/sprites/c.png")

    assert [e.display_name for e in gui.session.entries] == ["b", "c", "a"]
    assert gui.session.sort_method is SortMethod.CUSTOM
    assert gui.sort_var.get() == SortMethod.CUSTOM.label
    assert gui.file_tree.selected == "/sprites/a.png"
    assert gui.repacks == 1


def test_drag_release_on_other_row(gui):
    gui._on_drag_start(SimpleNamespace(y=45))
    gui._on_drag_motion(SimpleNamespace(y=10))
    assert gui.file_tree.cursor == "sb_v_double_arrow"

    gui._on_drag_release(SimpleNamespace(y=5))

    assert [e.display_name for e in gui.session.entries] == ["c", "a", "b"]
    assert gui.file_tree.cursor == ""
    assert gui._drag_source is None


def test_drag_onto_same_row_or_empty_space_keeps_order(gui):
    gui._on_drag_start(SimpleNamespace(y=25))
    gui._on_drag_release(SimpleNamespace(y=30))

    gui._on_drag_start(SimpleNamespace(y=25))
    gui._on_drag_release(SimpleNamespace(y=500))

    assert [e.display_name for e in gui.session.entries] == ["a", "b", "c"]
    assert gui.session.sort_method is SortMethod.NAME_ASC
    assert gui.repacks == 0


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
