"""Configuration module for target sites"""

import importlib

# Mapping of site names to their config modules
CONFIG_MODULES = {
    'favbet': 'config.favbet_config',
}

def get_config(site: str = 'favbet'):
    """Get configuration module for a site"""
    if site not in CONFIG_MODULES:
        raise ValueError(f"Unknown site: {site}")
    return importlib.import_module(CONFIG_MODULES[site])

__all__ = ['get_config', 'CONFIG_MODULES']
