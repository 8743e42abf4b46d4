"""
Minimal passive-mode FTP client.
"""

import logging

from ftpclient.core import Client, Response, FTPError

__version__ = "0.1.0"

# Silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["Client", "Response", "FTPError", "__version__"]
