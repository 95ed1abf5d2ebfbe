"""Page objects for the target site"""

import importlib
from typing import Dict, List

# Registry of page object classes by surface name
PAGE_REGISTRY: Dict[str, str] = {
    'login': 'src.pages.login.LoginPage',
    'live': 'src.pages.live.LivePage',
    'favorites': 'src.pages.favorites.FavoritesPage',
    'settings': 'src.pages.settings.SettingsPage',
    'social': 'src.pages.social.SocialPage',
    'bonuses': 'src.pages.bonuses.BonusesApi',
}


def get_available_pages() -> List[str]:
    """Get list of all registered page names"""
    return list(PAGE_REGISTRY.keys())


def get_page_class(name: str):
    """Dynamically import and return a page object class"""
    if name not in PAGE_REGISTRY:
        raise ValueError(f"Unknown page: {name}. Available: {get_available_pages()}")
    module_path, class_name = PAGE_REGISTRY[name].rsplit('.', 1)
    return getattr(importlib.import_module(module_path), class_name)
