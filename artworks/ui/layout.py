from nicegui import ui
from artworks.core.config import config_manager

def apply_theme():
    """Applies the global color theme to the application."""
    ui.colors(
        primary='#1e1e2e',
        secondary='#cba6f7',
        accent='#89b4fa',
        positive='#a6e3a1',
        negative='#f38ba8',
        info='#74c7ec',
        warning='#f9e2af'
    )

def create_layout(content_function):
    """
    Wraps the content_function in the standard application layout
    (Header, Content Area).
    """
    apply_theme()

    def open_settings():
        with ui.dialog() as d, ui.card().classes('w-96'):
            ui.label('Settings').classes('text-h6')

            def change_page_size(e):
                config_manager.set_page_size(int(e.value))
                ui.notify('Default page size saved. It applies on the next visit.')

            ui.select(config_manager.get_page_size_options(),
                      label='Default rows per page',
                      value=config_manager.get_page_size(),
                      on_change=change_page_size).classes('w-full')

            def change_deselection(e):
                config_manager.set_persist_deselection(bool(e.value))
                ui.notify('Reload the page to apply the new selection policy.')

            with ui.switch('Unchecking a row removes it from the saved selection',
                           value=config_manager.get_persist_deselection(),
                           on_change=change_deselection):
                ui.tooltip('When off, selections only ever grow until cleared')

            with ui.row().classes('w-full justify-end q-mt-md'):
                ui.button('Close', on_click=d.close).props('flat')
        d.open()

    with ui.header().classes(replace='row items-center') as header:
        header.classes('bg-primary text-white')
        ui.label('Artworks').classes('text-h6 q-ml-md font-bold')
        ui.space()
        with ui.button(icon='settings', on_click=open_settings).props('flat color=white'):
            ui.tooltip('Open application settings')

    with ui.column().classes('w-full q-pa-md items-start'):
        content_function()
