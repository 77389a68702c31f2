from nicegui import ui

from artworks.core.logging_setup import setup_logging
setup_logging()

from artworks.ui.layout import create_layout
from artworks.ui.artworks_table import artworks_page

@ui.page('/')
def home():
    create_layout(artworks_page)

if __name__ in {"__main__", "__mp_main__"}:
    # Disable reload to prevent restart loops when writing to data/
    ui.run(title='Artworks Table', favicon='🖼️', reload=False)
