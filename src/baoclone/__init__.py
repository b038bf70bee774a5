"""
baoclone - clone utility for Baofeng UV-5R, UV-B5 and BF-888S radios

Downloads and uploads radio memory over the programming cable and decodes
it into channels, band limits and settings.
"""

__version__ = "1.0.0"

from baoclone.session import RadioSession
from baoclone.image import load_image, save_image

__all__ = [
    "RadioSession",
    "load_image",
    "save_image",
    "__version__",
]
