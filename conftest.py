"""
Root conftest.py for the Crisis Corner project.

Puts each service directory on sys.path so its ``app`` package imports
the same way it does inside the service container.
"""

import sys
from pathlib import Path


def pytest_configure(config):
    """
    Add service directories to sys.path.

    Service test conftests import ``app`` at collection time, so the
    path has to be in place before collection starts.
    """
    root_dir = Path(__file__).parent

    for service_path in sorted((root_dir / "services").iterdir()):
        if (service_path / "app").is_dir() and str(service_path) not in sys.path:
            sys.path.insert(0, str(service_path))
