# utils/platform_utils.py

"""Platform-specific utilities."""
import platform
from typing import Dict


def get_platform_info() -> Dict:
    """Gets platform name and which OS search index, if any, can exist here."""
    system = platform.system().lower()
    if system == 'windows':
        return {'name': 'Windows', 'index_provider': 'windows-search'}
    elif system == 'darwin':
        return {'name': 'macOS', 'index_provider': None}
    else:
        return {'name': platform.system() or 'Unknown', 'index_provider': None}


def supports_windows_search() -> bool:
    """True when running on a platform that ships the Windows Search service."""
    return get_platform_info()['index_provider'] == 'windows-search'
