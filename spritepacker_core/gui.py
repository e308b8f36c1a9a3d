"""
GUI for Sprite Packer.
Folder selection, atlas options, manual ordering, zoomable preview and export.
"""

import tkinter as tk
from tkinter import ttk, filedialog, messagebox
from pathlib import Path
import threading
import logging
from typing import Dict, Optional

from PIL import Image, ImageTk

from .image_entry import IMAGE_EXTENSIONS, ImageEntry
from .packer import ATLAS_SIZES, PADDING_OPTIONS, PackResult
from .project import DEFAULT_PROJECT_FILENAME, ProjectFormatError, load_project, save_project
from .renderer import AtlasRenderer, format_file_size
from .session import AtlasSession, NothingPackedError, SettingsStore
from .sorter import SortMethod
from .logger import setup_logging, generate_log_filename


THEMES = {
    False: {'background': '#F0F0F0', 'foreground': '#000000', 'canvas': '#C8C8C8'},
    True: {'background': '#2B2B2B', 'foreground': '#E6E6E6', 'canvas': '#1E1E1E'},
}
ZOOM_STEP = 0.1


class SpritePackerGUI:
    """Main GUI application for Sprite Packer."""

    def __init__(self, root: tk.Tk, settings: Optional[SettingsStore] = None):
        """Initialize the GUI application."""
        self.root = root
        self.root.title("Sprite Packer")
        self.root.geometry(f"{round(1200 * 1.2)}x{round(800 * 1.2)}")

        # Setup logging
        setup_logging()
        self.logger = logging.getLogger(__name__)

        # Initialize components
        self.settings = settings or SettingsStore()
        self.session = AtlasSession()
        self.session.set_zoom(self.settings.atlas_zoom)
        self.renderer = AtlasRenderer()
        self.atlas_image: Optional[Image.Image] = None
        self._preview_photo: Optional[ImageTk.PhotoImage] = None
        self._thumbnails: Dict[str, ImageTk.PhotoImage] = {}
        self._drag_source: Optional[str] = None

        # Create GUI
        self._create_widgets()
        self._apply_theme(self.settings.dark_mode)

        self.logger.info("Sprite Packer GUI initialized")

    def _create_widgets(self):
        """Create all GUI widgets."""

        # Main frame
        main_frame = ttk.Frame(self.root, padding="10")
        main_frame.grid(row=0, column=0, sticky=(tk.W, tk.E, tk.N, tk.S))

        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)
        main_frame.columnconfigure(1, weight=1)
        main_frame.rowconfigure(1, weight=1)

        # Toolbar
        toolbar = ttk.Frame(main_frame)
        toolbar.grid(row=0, column=0, columnspan=2, sticky=(tk.W, tk.E), pady=(0, 10))

        ttk.Button(toolbar, text="Select Folder...", command=self._browse_folder).pack(side=tk.LEFT, padx=2)
        ttk.Button(toolbar, text="Add Files...", command=self._add_files).pack(side=tk.LEFT, padx=2)

        ttk.Label(toolbar, text="Recent:").pack(side=tk.LEFT, padx=(10, 2))
        self.recent_var = tk.StringVar()
        self.recent_combo = ttk.Combobox(toolbar, textvariable=self.recent_var,
                                         values=self.settings.recent_folders,
                                         state="readonly", width=30)
        self.recent_combo.pack(side=tk.LEFT)
        self.recent_combo.bind('<<ComboboxSelected>>', self._on_recent_selected)

        ttk.Label(toolbar, text="Atlas Size:").pack(side=tk.LEFT, padx=(10, 2))
        self.atlas_size_var = tk.StringVar(value=self.session.config.size_label)
        size_combo = ttk.Combobox(toolbar, textvariable=self.atlas_size_var,
                                  values=[f"{w}x{h}" for w, h in ATLAS_SIZES],
                                  state="readonly", width=10)
        size_combo.pack(side=tk.LEFT)
        size_combo.bind('<<ComboboxSelected>>', self._on_options_change)

        ttk.Label(toolbar, text="Padding:").pack(side=tk.LEFT, padx=(10, 2))
        self.padding_var = tk.StringVar(value=str(self.session.config.padding))
        padding_combo = ttk.Combobox(toolbar, textvariable=self.padding_var,
                                     values=[str(p) for p in PADDING_OPTIONS],
                                     state="readonly", width=4)
        padding_combo.pack(side=tk.LEFT)
        padding_combo.bind('<<ComboboxSelected>>', self._on_options_change)

        ttk.Label(toolbar, text="Sort:").pack(side=tk.LEFT, padx=(10, 2))
        self._sort_by_label = {method.label: method for method in SortMethod}
        self.sort_var = tk.StringVar(value=self.session.sort_method.label)
        self.sort_combo = ttk.Combobox(toolbar, textvariable=self.sort_var,
                                       values=list(self._sort_by_label),
                                       state="readonly", width=28)
        self.sort_combo.pack(side=tk.LEFT)
        self.sort_combo.bind('<<ComboboxSelected>>', self._on_options_change)

        ttk.Button(toolbar, text="Toggle Theme", command=self._toggle_theme).pack(side=tk.RIGHT, padx=2)

        # File list with manual ordering controls
        list_frame = ttk.Frame(main_frame)
        list_frame.grid(row=1, column=0, sticky=(tk.N, tk.S), padx=(0, 10))
        list_frame.rowconfigure(0, weight=1)

        self.file_tree = ttk.Treeview(list_frame, columns=("size",), show="tree headings",
                                      selectmode="browse", height=20)
        self.file_tree.heading("#0", text="File")
        self.file_tree.heading("size", text="Size")
        self.file_tree.column("#0", width=220)
        self.file_tree.column("size", width=80, anchor=tk.E)
        self.file_tree.grid(row=0, column=0, sticky=(tk.N, tk.S))

        tree_scroll = ttk.Scrollbar(list_frame, orient=tk.VERTICAL, command=self.file_tree.yview)
        tree_scroll.grid(row=0, column=1, sticky=(tk.N, tk.S))
        self.file_tree.configure(yscrollcommand=tree_scroll.set)
        self.file_tree.bind('<ButtonPress-1>', self._on_drag_start)
        self.file_tree.bind('<B1-Motion>', self._on_drag_motion)
        self.file_tree.bind('<ButtonRelease-1>', self._on_drag_release)

        order_frame = ttk.Frame(list_frame)
        order_frame.grid(row=1, column=0, columnspan=2, pady=5)
        ttk.Button(order_frame, text="Move Up", command=lambda: self._move_selected(-1)).pack(side=tk.LEFT, padx=2)
        ttk.Button(order_frame, text="Move Down", command=lambda: self._move_selected(1)).pack(side=tk.LEFT, padx=2)
        ttk.Button(order_frame, text="Remove", command=self._remove_selected).pack(side=tk.LEFT, padx=2)

        # Preview canvas
        preview_frame = ttk.Frame(main_frame)
        preview_frame.grid(row=1, column=1, sticky=(tk.W, tk.E, tk.N, tk.S))
        preview_frame.columnconfigure(0, weight=1)
        preview_frame.rowconfigure(0, weight=1)

        self.preview_canvas = tk.Canvas(preview_frame, highlightthickness=0, cursor="fleur")
        self.preview_canvas.grid(row=0, column=0, sticky=(tk.W, tk.E, tk.N, tk.S))
        self.preview_canvas.bind('<ButtonPress-1>', self._on_pan_start)
        self.preview_canvas.bind('<B1-Motion>', self._on_pan_move)
        self.preview_canvas.bind('<Control-MouseWheel>', self._on_zoom_wheel)
        self.preview_canvas.bind('<Control-Button-4>', lambda e: self._zoom_by(ZOOM_STEP))
        self.preview_canvas.bind('<Control-Button-5>', lambda e: self._zoom_by(-ZOOM_STEP))

        # Bottom bar
        bottom_frame = ttk.Frame(main_frame)
        bottom_frame.grid(row=2, column=0, columnspan=2, sticky=(tk.W, tk.E), pady=(10, 0))
        bottom_frame.columnconfigure(1, weight=1)

        button_frame = ttk.Frame(bottom_frame)
        button_frame.grid(row=0, column=0, sticky=tk.W)

        self.save_atlas_button = ttk.Button(button_frame, text="Save Atlas...", command=self._save_atlas, state=tk.DISABLED)
        self.save_atlas_button.pack(side=tk.LEFT, padx=2)
        ttk.Button(button_frame, text="Save Project...", command=self._save_project).pack(side=tk.LEFT, padx=2)
        ttk.Button(button_frame, text="Load Project...", command=self._load_project).pack(side=tk.LEFT, padx=2)

        self.packing_info_var = tk.StringVar(value="No folder selected")
        ttk.Label(bottom_frame, textvariable=self.packing_info_var).grid(row=0, column=1, sticky=tk.W, padx=10)

        self.progress_var = tk.StringVar(value="Ready")
        ttk.Label(bottom_frame, textvariable=self.progress_var).grid(row=0, column=2, sticky=tk.E, padx=5)
        self.progress_bar = ttk.Progressbar(bottom_frame, mode='indeterminate', length=120)
        self.progress_bar.grid(row=0, column=3, sticky=tk.E)

    def _apply_theme(self, dark: bool):
        """Apply light or dark colors."""
        colors = THEMES[dark]
        style = ttk.Style(self.root)
        style.configure('.', background=colors['background'], foreground=colors['foreground'])
        self.root.configure(background=colors['background'])
        self.preview_canvas.configure(background=colors['canvas'])

    def _toggle_theme(self):
        self._apply_theme(self.settings.toggle_dark_mode())

    # Folder and file handling

    def _browse_folder(self):
        """Browse for sprite folder."""
        folder = filedialog.askdirectory(title="Select Sprite Folder")
        if folder:
            self._open_folder(folder)

    def _on_recent_selected(self, event=None):
        folder = self.recent_var.get()
        if folder:
            self._open_folder(folder)

    def _open_folder(self, folder: str):
        """Scan a folder in a worker thread."""
        self.recent_combo.configure(values=self.settings.add_recent_folder(folder))
        self._start_progress("Loading images...")
        threading.Thread(target=self._scan_worker, args=(folder,), daemon=True).start()

    def _scan_worker(self, folder: str):
        """Worker thread for folder scanning."""
        try:
            self.session.load_folder(folder)
            self.root.after(0, self._scan_complete)
        except Exception as e:
            self.logger.error(f"Error selecting folder: {e}")
            self.root.after(0, lambda message=str(e): self._show_error("Error selecting folder", message))

    def _scan_complete(self):
        self._stop_progress()
        self._refresh_file_list()
        self._update_atlas()

    def _add_files(self):
        """Add individual image files to the session."""
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
        paths = filedialog.askopenfilenames(title="Add Images", filetypes=[("Images", patterns)])
        if not paths:
            return
        try:
            self.session.add_files(paths)
        except OSError as e:
            self._show_error("Error adding files", str(e))
            return
        self._refresh_file_list()
        self._update_atlas()

    def _refresh_file_list(self):
        """Rebuild the file list from the session order."""
        self.file_tree.delete(*self.file_tree.get_children())
        for entry in self.session.entries:
            self.file_tree.insert("", tk.END, iid=entry.identifier, text=entry.display_name,
                                  image=self._thumbnail_for(entry),
                                  values=(format_file_size(entry.byte_size),))

        count = len(self.session.entries)
        self.packing_info_var.set(f"Found {count} image files" if count else "No image files found")

    def _thumbnail_for(self, entry: ImageEntry):
        if entry.identifier not in self._thumbnails:
            try:
                self._thumbnails[entry.identifier] = ImageTk.PhotoImage(self.renderer.thumbnail(entry.path))
            except OSError as e:
                self.logger.warning(f"Could not create preview for {entry.identifier}: {e}")
                return ""
        return self._thumbnails[entry.identifier]

    def _selected_identifier(self) -> Optional[str]:
        selection = self.file_tree.selection()
        return selection[0] if selection else None

    def _move_selected(self, offset: int):
        """Move the selected file up or down, switching to custom ordering."""
        identifier = self._selected_identifier()
        if identifier is None:
            return
        index = self.session.identifiers.index(identifier)
        self._apply_move(identifier, index + offset)

    def _apply_move(self, identifier: str, new_index: int):
        self.session.move(identifier, new_index)
        self.sort_var.set(SortMethod.CUSTOM.label)
        self._refresh_file_list()
        self.file_tree.selection_set(identifier)
        self._update_atlas()

    # Drag and drop reordering

    def _on_drag_start(self, event):
        self._drag_source = self.file_tree.identify_row(event.y) or None

    def _on_drag_motion(self, event):
        if self._drag_source is not None:
            self.file_tree.configure(cursor="sb_v_double_arrow")

    def _on_drag_release(self, event):
        source, self._drag_source = self._drag_source, None
        self.file_tree.configure(cursor="")
        target = self.file_tree.identify_row(event.y)
        if source and target:
            self._drop_on(source, target)

    def _drop_on(self, source: str, target: str):
        """Move the dragged file to the position of the row it was dropped on."""
        if source == target:
            return
        self._apply_move(source, self.file_tree.index(target))

    def _remove_selected(self):
        identifier = self._selected_identifier()
        if identifier is None:
            return
        self.session.remove(identifier)
        self._refresh_file_list()
        self._update_atlas()

    # Atlas options and packing

    def _on_options_change(self, event=None):
        """Apply atlas size, padding and sort selection, then repack."""
        try:
            width, height = (int(v) for v in self.atlas_size_var.get().split('x'))
            self.session.set_canvas(width, height)
            self.session.set_padding(int(self.padding_var.get()))
        except ValueError as e:
            messagebox.showerror("Error", f"Invalid atlas options: {e}")
            return

        self.session.set_sort_method(self._sort_by_label[self.sort_var.get()])
        self._refresh_file_list()
        self._update_atlas()

    def _update_atlas(self):
        """Pack the current entries and render the atlas in a worker thread."""
        if not self.session.entries:
            self._clear_preview()
            return

        try:
            result = self.session.repack()
        except NothingPackedError as e:
            # Previous atlas stays visible
            self.save_atlas_button.config(state=tk.DISABLED)
            self._show_error("Error updating atlas", str(e))
            return

        self.packing_info_var.set(f"Placed {len(result.placed)} of {result.total} images, "
                                  f"{len(result.rejected)} rejected, "
                                  f"coverage {result.coverage():.0%}")
        self._start_progress("Rendering atlas...")
        threading.Thread(target=self._render_worker, args=(result,), daemon=True).start()

    def _render_worker(self, result: PackResult):
        """Worker thread for atlas rendering."""
        try:
            atlas, _ = self.renderer.compose(result)
            self.root.after(0, lambda: self._render_complete(result, atlas))
        except Exception as e:
            self.logger.error(f"Error rendering atlas: {e}", exc_info=True)
            self.root.after(0, lambda message=str(e): self._show_error("Error updating atlas", message))

    def _render_complete(self, result: PackResult, atlas: Image.Image):
        # A newer pack superseded this render
        if result is not self.session.last_result:
            self.logger.debug("Discarding outdated atlas render")
            return
        self._stop_progress()
        self.atlas_image = atlas
        self._show_preview()
        self.save_atlas_button.config(state=tk.NORMAL)

    def _clear_preview(self):
        """Drop the atlas and preview once the session has no images left."""
        self._stop_progress()
        self.session.last_result = None
        self.atlas_image = None
        self._preview_photo = None
        self.preview_canvas.delete("atlas")
        self.save_atlas_button.config(state=tk.DISABLED)

    # Preview zoom and pan

    def _show_preview(self):
        if self.atlas_image is None:
            return
        preview = self.renderer.render_preview(self.atlas_image, self.session.zoom)
        self._preview_photo = ImageTk.PhotoImage(preview)
        self.preview_canvas.delete("atlas")
        self.preview_canvas.create_image(0, 0, anchor=tk.NW, image=self._preview_photo, tags="atlas")
        self.preview_canvas.configure(scrollregion=(0, 0, preview.width, preview.height))

    def _on_pan_start(self, event):
        self.preview_canvas.scan_mark(event.x, event.y)

    def _on_pan_move(self, event):
        self.preview_canvas.scan_dragto(event.x, event.y, gain=1)

    def _on_zoom_wheel(self, event):
        self._zoom_by(ZOOM_STEP if event.delta > 0 else -ZOOM_STEP)

    def _zoom_by(self, delta: float):
        zoom = self.session.set_zoom(self.session.zoom + delta)
        self.settings.atlas_zoom = zoom
        self._show_preview()

    # Export and projects

    def _save_atlas(self):
        """Save the current atlas as PNG along with its log."""
        result = self.session.last_result
        if result is None:
            messagebox.showinfo("Save Atlas", "No atlas to save. Please generate an atlas first.")
            return

        path = filedialog.asksaveasfilename(title="Save Atlas", defaultextension=".png",
                                            initialfile="texture_atlas.png",
                                            filetypes=[("PNG", "*.png")])
        if not path:
            return

        output_path = Path(path)
        log_path = output_path.parent / generate_log_filename(output_path.stem)
        self._start_progress("Saving atlas...")
        threading.Thread(target=self._save_worker, args=(result, output_path, log_path), daemon=True).start()

    def _save_worker(self, result: PackResult, output_path: Path, log_path: Path):
        """Worker thread for atlas export."""
        try:
            self.renderer.save_atlas(result, output_path, log_path=log_path,
                                     project_name=output_path.stem,
                                     sort_method=self.session.sort_method.value)
            self.root.after(0, lambda: self._save_complete(output_path))
        except Exception as e:
            self.root.after(0, lambda message=str(e): self._show_error("Error saving atlas", message))

    def _save_complete(self, output_path: Path):
        self._stop_progress()
        messagebox.showinfo("Save Atlas", f"Atlas saved successfully to: {output_path}")

    def _save_project(self):
        path = filedialog.asksaveasfilename(title="Save Project", defaultextension=".json",
                                            initialfile=DEFAULT_PROJECT_FILENAME,
                                            filetypes=[("JSON", "*.json")])
        if not path:
            return
        try:
            save_project(self.session.snapshot(), path)
        except OSError as e:
            self._show_error("Error saving project", str(e))

    def _load_project(self):
        path = filedialog.askopenfilename(title="Load Project", filetypes=[("JSON", "*.json")])
        if not path:
            return
        try:
            snapshot = load_project(path)
        except (OSError, ProjectFormatError) as e:
            self._show_error("Error loading project", str(e))
            return

        self.session.restore(snapshot)
        self.atlas_size_var.set(snapshot.config.size_label)
        self.padding_var.set(str(snapshot.config.padding))
        self.sort_var.set(snapshot.sort_method.label)
        self._refresh_file_list()
        self._update_atlas()

    # Progress and errors

    def _show_error(self, title: str, message: str):
        self._stop_progress()
        messagebox.showerror(title, message)

    def _start_progress(self, message: str):
        """Start progress indication."""
        self.progress_var.set(message)
        self.progress_bar.start()

    def _stop_progress(self):
        """Stop progress indication."""
        self.progress_bar.stop()
        self.progress_var.set("Ready")
