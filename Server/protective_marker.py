"""
UploadFiles Server - Protective Marker File

Every folder created through the API receives a web-server configuration
file that disables script execution and restricts access to image types.
The marker is reserved: it is never listed, never deleted by a generic
file delete, never copied (it is regenerated instead) and cannot be the
target of a rename, move, upload or blob import.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


MARKER_FILENAME = ".htaccess"

MARKER_CONTENT = """# Disable script execution
<FilesMatch "\\.(php|php3|php4|php5|phtml|pl|py|jsp|asp|sh|cgi)$">
  Order Deny,Allow
  Deny from all
</FilesMatch>

# Allow images only
<FilesMatch "\\.(jpg|jpeg|png|gif|webp|svg)$">
  Order Allow,Deny
  Allow from all
</FilesMatch>

# Deny access to hidden files
<FilesMatch "^\\.">
  Order Deny,Allow
  Deny from all
</FilesMatch>

Options -ExecCGI
RemoveHandler .php .php3 .php4 .php5 .phtml .pl .py .jsp .asp .sh .cgi
"""


def IsReservedName(name: str) -> bool:
    """
    Check whether a file name (or the last segment of a path) is the marker

    Args:
        name: File name or slash-delimited path

    Returns:
        bool: True if the name is reserved
    """
    if not name:
        return False
    last_segment = name.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    return last_segment == MARKER_FILENAME


def WriteMarkerFile(directory: Path) -> Path:
    """
    Write (or regenerate) the marker file in a directory

    Args:
        directory: Existing directory

    Returns:
        Path: Path of the written marker
    """
    marker_path = Path(directory) / MARKER_FILENAME
    marker_path.write_text(MARKER_CONTENT, encoding='utf-8')
    logger.debug(f"Wrote protective marker: {marker_path}")
    return marker_path
