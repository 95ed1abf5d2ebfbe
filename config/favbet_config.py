"""Configuration constants for the favbet.ua UI suite"""

BASE_URL = "https://favbet.ua"

# Site paths (language prefix first)
HOME_PATH = "/uk/"
LOGIN_PATH = "/uk/login/"
LIVE_PATH = "/uk/live/all/"
FAVORITES_PATH = "/uk/favorites/"
SETTINGS_PATH = "/{language}/personal-office/settings/"

LANGUAGES = ("uk", "en")
THEMES = ("light", "auto", "dark")

# Login form
LOGIN_LINK = ['a:has-text("Вхід")', 'a:has-text("Login")']
EMAIL_LABEL = "Електронна пошта"
PASSWORD_LABEL = "Пароль"
SUBMIT_LABEL = "Увійти"
REMEMBER_ME = 'input[type="checkbox"][name="remember"], .remember-checkbox'
LOGIN_ERROR = '.error-message, .login-error, [class*="error"]'

# Logged-in indicators, most authoritative first; any visible one counts
LOGGED_IN_INDICATORS = [
    '.user-balance',
    'a:has-text("Депозит")',
    'button:has-text("Вихід")',
    'button:has-text("Logout")',
    '[class*="user-menu"]',
    '[class*="account"]',
]
LOGOUT_BUTTON = ['button:has-text("Вихід")', 'button:has-text("Logout")']

# Events (shared markup of the live and favorites lists)
EVENT = '[data-role^="event-id-"]'
EVENT_STAR_ICON = 'svg[data-role="event-favorite-star-icon"]'
EVENT_FAVORITE_BUTTON = '[data-role="event-favorite-star"]'
FAVORITED_STYLE = "color: var(--state_favorite)"
LOADING_SPINNER = '.loading, .spinner, [class*="loader"]'
NO_EVENTS = [':text("Немає подій")', ':text("СПОРТ НЕ ЗНАЙДЕНО")', '.no-events']

# Favorites
FAVORITES_LINK = ['a[href*="/favorites"]', 'a:has-text("Обране")', 'a:has-text("Favorites")']
FAVORITES_EMPTY = ['.empty-favorites', '.no-favorites', ':text("Немає обраних")', ':text("No favorites")']

# Settings
SETTINGS_LANGUAGE = '[data-role="settings-language"]'
SETTINGS_LANGUAGE_OPTION = 'div[data-role="option-{language}"]'
SETTINGS_THEME_SWITCHER = '[data-role="settings-color-scheme-switcher-{theme}"]'
SETTINGS_TITLE = '[data-role="account_pageTitle_text"]'
SETTINGS_TITLES = {"uk": "Налаштування", "en": "Settings"}
SETTINGS_LABELS = {"uk": ("Мова", "Тема"), "en": ("Language", "Theme")}

# Social
YOUTUBE_URL = "https://www.youtube.com/@favbetua"
YOUTUBE_LINK = f'a[href="{YOUTUBE_URL}"]'
YOUTUBE_URL_PATTERN = r"youtube\.com/@favbetua"
YOUTUBE_TITLE_PATTERN = r"Favbet UA - YouTube"
YOUTUBE_CHANNEL_HEADING = 'h1:has-text("Favbet UA")'
YOUTUBE_CHANNEL_HANDLE = "text=@favbetua"
YOUTUBE_CHANNEL_DESCRIPTION = "text=Офіційний ютуб-канал компанії Favbet"
YOUTUBE_TARGET_VIDEO = "FAVBET | Support Those Who Support Us: ENGLAND | 2022 FIFA World Cup"
YOUTUBE_TARGET_VIDEO_LINK = "FAVBET | Support Those Who Support Us: ENGLAND"
YOUTUBE_SEARCH_LABEL = "Search"

# Account API, called from inside a logged-in page
BONUS_COUNT_ENDPOINT = "/accounting/api/crm_roxy/getanybonuscount"
BONUS_WAGERING_ENDPOINT = "/service/crm_proxy/crm_api/gamegate/anybonus/wagering"
DEFAULT_CURRENCY = "UAH"

# Display titles
TITLE_MAX_LENGTH = 50
