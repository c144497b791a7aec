from geosat.imaging.composer import stitch, stitch_and_save
from geosat.imaging.io import save_jpeg

__all__ = ['save_jpeg', 'stitch', 'stitch_and_save']
