from nicegui import ui
from typing import List, Optional
import logging

from artworks.core.config import config_manager
from artworks.core.models import Artwork, Page
from artworks.core.persistence import persistence, selection_store
from artworks.services.artic_api import artic_service
from artworks.services.page_cache import PageCache, PageLoadError
from artworks.services.selection_manager import SelectionManager

logger = logging.getLogger(__name__)

COLUMNS = [
    {'name': 'title', 'label': 'Title', 'field': 'title', 'align': 'left'},
    {'name': 'place_of_origin', 'label': 'Place of Origin', 'field': 'place_of_origin', 'align': 'left'},
    {'name': 'artist_display', 'label': 'Artist', 'field': 'artist_display', 'align': 'left'},
    {'name': 'inscriptions', 'label': 'Inscriptions', 'field': 'inscriptions', 'align': 'left'},
    {'name': 'date_start', 'label': 'Start Date', 'field': 'date_start'},
    {'name': 'date_end', 'label': 'End Date', 'field': 'date_end'},
]

def build_rows(page: Optional[Page]) -> List[dict]:
    if page is None:
        return []
    return [r.to_row() for r in page.records]

class ArtworksTablePage:
    def __init__(self, manager: Optional[SelectionManager] = None):
        if manager is None:
            manager = SelectionManager(
                PageCache(artic_service.fetch_page),
                selection_store,
                persist_deselection=config_manager.get_persist_deselection()
            )
        self.manager = manager
        self.manager.register(self.on_state_changed)

        saved_state = persistence.load_ui_state()
        rows = saved_state.get('artworks_rows', config_manager.get_page_size())
        self.state = {
            'first': saved_state.get('artworks_first', 0),
            'rows': rows if isinstance(rows, int) and rows > 0 else config_manager.get_page_size(),
            'page': 1,
            'total_pages': 1,
            'loading': False,
        }

        self.table = None
        self.dialog = None
        self.count_input = None
        self.pagination_showing_label = None
        self.pagination_total_label = None

    # --- Manager callbacks ---

    def on_state_changed(self, page: Optional[Page], visible: List[Artwork]):
        if self.table is not None:
            self.table.rows = build_rows(page)
            self.table.selected = [r.to_row() for r in visible]
            self.table.update()
        if page is not None:
            self.state['page'] = page.page_number
            self.state['total_pages'] = page.total_pages
        self.update_pagination_labels()

    def update_pagination_labels(self):
        page = self.manager.page
        if self.pagination_showing_label is not None:
            if page is None or not page.records:
                self.pagination_showing_label.text = "No artworks loaded"
            else:
                start = page.first + 1
                end = page.first + len(page.records)
                self.pagination_showing_label.text = f"Showing {start}-{end} of {page.total_count}"
        if self.pagination_total_label is not None:
            self.pagination_total_label.text = f"/ {max(1, self.state['total_pages'])}"

    # --- Pagination ---

    async def change_position(self, first: int, rows: int):
        self.state['loading'] = True
        try:
            result = await self.manager.on_page_change(first, rows)
        except PageLoadError as e:
            ui.notify(f"Could not load page {e.page_number}: {e}", type='negative')
            return
        finally:
            self.state['loading'] = False

        if result is None:
            # A newer request is on its way
            return

        self.state['first'] = first
        self.state['rows'] = rows
        persistence.save_ui_state({'artworks_first': first, 'artworks_rows': rows})

    async def set_page(self, p):
        try:
            new_p = int(p) if p else 1
        except (TypeError, ValueError):
            return
        new_p = max(1, min(self.state['total_pages'], new_p))
        await self.change_position((new_p - 1) * self.state['rows'], self.state['rows'])

    async def change_page(self, delta: int):
        new_p = max(1, min(self.state['total_pages'], self.state['page'] + delta))
        if new_p != self.state['page']:
            await self.change_position((new_p - 1) * self.state['rows'], self.state['rows'])

    async def change_page_size(self, e):
        rows = int(e.value)
        # Keep the first visible record on screen
        first = (self.state['first'] // rows) * rows
        await self.change_position(first, rows)

    # --- Selection ---

    def on_table_select(self, e):
        page = self.manager.page
        if page is None:
            return
        ids = {row.get('id') for row in e.selection}
        self.manager.on_row_selection_toggle([r for r in page.records if r.id in ids])

    def clear_selection(self):
        self.manager.clear_selection()
        ui.notify('Selection cleared.', type='info')

    def open_bulk_dialog(self):
        self.manager.open_bulk_dialog()
        if self.count_input is not None:
            self.count_input.value = ''
        self.dialog.open()

    def on_input_change(self, e):
        self.manager.set_pending_input(e.value)

    def submit_bulk_dialog(self):
        before = len(self.manager.visible_selection)
        visible = self.manager.on_bulk_select_submit()
        self.dialog.close()
        if visible and len(visible) != before:
            ui.notify(f"Selected {len(visible)} artworks.", type='positive')

    def on_dialog_hide(self):
        if self.manager.bulk_dialog_open:
            self.manager.cancel_bulk_dialog()

    # --- Layout ---

    def build_dialog(self):
        self.dialog = ui.dialog()
        self.dialog.on('hide', lambda: self.on_dialog_hide())
        with self.dialog, ui.card().classes('w-96'):
            ui.label('Select Number of Items to Check').classes('text-h6')
            self.count_input = ui.input('Enter a number', on_change=self.on_input_change) \
                .props('type=number min=1').classes('w-full')
            self.count_input.on('keydown.enter', lambda: self.submit_bulk_dialog())
            with ui.row().classes('w-full justify-end q-mt-md'):
                ui.button('Cancel', on_click=self.dialog.close).props('flat')
                ui.button('Submit', on_click=self.submit_bulk_dialog).props('color=primary')

    def content_area(self):
        with ui.row().classes('w-full items-center justify-between q-mb-sm'):
            with ui.row().classes('items-center gap-1'):
                with ui.button(icon='expand_more', on_click=self.open_bulk_dialog).props('flat dense round'):
                    ui.tooltip('Select the first N artworks of this page')
                ui.label('Title').classes('font-bold')
            with ui.button('Clear selection', icon='deselect', on_click=self.clear_selection).props('flat'):
                ui.tooltip('Forget every selected artwork')

        self.table = ui.table(
            columns=COLUMNS,
            rows=[],
            row_key='id',
            selection='multiple',
            pagination=0,
            on_select=self.on_table_select
        ).props('hide-pagination flat bordered').classes('w-full')

        with ui.row().classes('w-full items-center justify-between q-mt-sm'):
            self.pagination_showing_label = ui.label("Loading...").classes('text-grey')

            with ui.row().classes('items-center gap-2'):
                with ui.button(icon='chevron_left', on_click=lambda: self.change_page(-1)).props('flat dense'):
                    ui.tooltip('Go to previous page')

                n_input = ui.number(min=1).bind_value(self.state, 'page') \
                    .props('dense borderless input-class="text-center"').classes('w-20')
                n_input.on('keydown.enter', lambda: self.set_page(self.state['page']))

                self.pagination_total_label = ui.label("/ 1")

                with ui.button(icon='chevron_right', on_click=lambda: self.change_page(1)).props('flat dense'):
                    ui.tooltip('Go to next page')

                ui.select(config_manager.get_page_size_options(), value=self.state['rows'],
                          label='Rows', on_change=self.change_page_size).classes('w-24')

    async def load_initial(self):
        try:
            await self.manager.start(self.state['first'], self.state['rows'])
        except PageLoadError as e:
            ui.notify(f"Could not load artworks: {e}", type='negative')

    def build_ui(self):
        with ui.column().classes('w-full max-w-screen-xl mx-auto'):
            ui.label('Artworks Table').classes('text-h4 self-center q-my-md')
            self.build_dialog()
            self.content_area()
        self.update_pagination_labels()
        ui.timer(0.1, self.load_initial, once=True)

def artworks_page():
    page = ArtworksTablePage()
    page.build_ui()
