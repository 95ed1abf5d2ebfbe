"""Account bonuses read through the site's own API.

The bonus endpoints only answer requests that carry the account's session
cookies, so they are called with ``fetch`` from inside a logged-in page
rather than from a separate HTTP client.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from playwright.async_api import Page

from config import favbet_config

__all__ = [
    'ApiResponse',
    'BonusInfo',
    'BonusReport',
    'BonusesApi',
    'BonusesApiError',
    'extract_bonus_count',
    'parse_bonuses',
    'validate_bonuses',
]

# Runs in the page; a rejected fetch comes back as {'error': message}
_FETCH_BONUSES_SCRIPT = """
async ([countPath, wageringPath]) => {
    const post = async (path) => {
        const response = await fetch(path, {
            method: 'POST',
            headers: {'Accept': 'application/json', 'Content-Type': 'application/json'},
            body: '{}',
        });
        const text = await response.text();
        let data = text;
        try { data = JSON.parse(text); } catch (e) {}
        return {status: response.status, statusText: response.statusText, ok: response.ok, data};
    };
    try {
        const count = await post(countPath);
        const bonusCount = count.ok && count.data && count.data.response && count.data.response.response
            ? count.data.response.response.bonusCount : 0;
        const wagering = bonusCount > 0 ? await post(wageringPath) : null;
        return {count, wagering};
    } catch (error) {
        return {error: String(error && error.message || error)};
    }
}
"""


class BonusesApiError(Exception):
    """The bonus count endpoint could not be reached or refused the session."""


@dataclass
class ApiResponse:
    """Status and body of one in-page ``fetch``."""
    status: int
    status_text: str
    ok: bool
    data: Any = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'ApiResponse':
        return cls(
            status=int(raw.get('status', 0)),
            status_text=str(raw.get('statusText', '')),
            ok=bool(raw.get('ok')),
            data=raw.get('data'),
        )


@dataclass
class BonusInfo:
    """One bonus on the account, with the API's alternative field names folded in."""
    id: Optional[str] = None
    type: Optional[str] = None
    amount: Any = 0
    currency: Any = favbet_config.DEFAULT_CURRENCY
    status: Any = 'active'
    wagering: Any = 0
    expiry_date: Optional[str] = None


@dataclass
class BonusReport:
    """Everything one bonus lookup returned."""
    bonus_count: int
    bonuses: List[BonusInfo] = field(default_factory=list)
    count_response: Optional[ApiResponse] = None
    wagering_response: Optional[ApiResponse] = None


def _first_present(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Value of the first key holding something truthy."""
    for key in keys:
        if raw.get(key):
            return raw[key]
    return default


def extract_bonus_count(count_data: Any) -> int:
    """``response.response.bonusCount`` from the count endpoint, 0 when absent."""
    try:
        count = count_data['response']['response']['bonusCount']
    except (KeyError, TypeError):
        return 0
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        return 0
    return count


def parse_bonuses(bonus_count: int, wagering_data: Any = None) -> List[BonusInfo]:
    """Build bonus records from the wagering response.

    When the count says bonuses exist but the wagering endpoint gave no usable
    list, one placeholder record per counted bonus is returned instead.

    Args:
        bonus_count: Number reported by the count endpoint
        wagering_data: Parsed body of the wagering endpoint, if it was called

    Returns:
        List of BonusInfo (empty when the account has no bonuses)
    """
    if bonus_count <= 0:
        return []

    items = wagering_data.get('response') if isinstance(wagering_data, dict) else None
    bonuses = []
    if isinstance(items, list):
        for index, raw in enumerate(item for item in items if isinstance(item, dict)):
            bonuses.append(BonusInfo(
                id=_first_present(raw, 'id', 'bonusId', default=f"bonus_{index + 1}"),
                type=_first_present(raw, 'type', 'bonusType', default='bonus'),
                amount=_first_present(raw, 'amount', 'value', default=0),
                currency=_first_present(raw, 'currency', default=favbet_config.DEFAULT_CURRENCY),
                status=_first_present(raw, 'status', default='active'),
                wagering=_first_present(raw, 'wagering', 'wageringRequired', default=0),
                expiry_date=_first_present(raw, 'expiryDate', 'validUntil'),
            ))

    if not bonuses:
        bonuses = [BonusInfo(id=f"bonus_{i + 1}", type='bonus') for i in range(bonus_count)]
    return bonuses


def _is_non_negative_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


def validate_bonuses(bonuses: List[BonusInfo]) -> List[str]:
    """Check each record's field types.

    Returns:
        List of problems (empty if every record is well formed)
    """
    errors = []
    for index, bonus in enumerate(bonuses):
        if not bonus.id and not bonus.type:
            errors.append(f"Bonus at index {index} missing both id and type")
        if bonus.amount is not None and not _is_non_negative_number(bonus.amount):
            errors.append(f"Bonus at index {index} has invalid amount: {bonus.amount!r}")
        if bonus.currency is not None and (not isinstance(bonus.currency, str) or not bonus.currency):
            errors.append(f"Bonus at index {index} has invalid currency: {bonus.currency!r}")
        if bonus.wagering is not None and not _is_non_negative_number(bonus.wagering):
            errors.append(f"Bonus at index {index} has invalid wagering: {bonus.wagering!r}")
        if bonus.status is not None and not isinstance(bonus.status, str):
            errors.append(f"Bonus at index {index} has invalid status: {bonus.status!r}")
    return errors


class BonusesApi:
    """Bonus endpoints as seen by the logged-in page."""

    def __init__(self, page: Page):
        self.page = page

    async def fetch_bonuses(self) -> BonusReport:
        """Ask the site for the account's bonuses.

        Raises:
            BonusesApiError: If the fetch failed or the count endpoint did not
                answer with a successful status
        """
        raw = await self.page.evaluate(
            _FETCH_BONUSES_SCRIPT,
            [favbet_config.BONUS_COUNT_ENDPOINT, favbet_config.BONUS_WAGERING_ENDPOINT],
        )
        if not isinstance(raw, dict) or raw.get('error') or not isinstance(raw.get('count'), dict):
            detail = raw.get('error') if isinstance(raw, dict) else raw
            raise BonusesApiError(f"bonus request failed in page: {detail}")

        count_response = ApiResponse.from_dict(raw['count'])
        logging.info(f"[bonuses] Count API: {count_response.status} {count_response.status_text}")
        if not count_response.ok:
            raise BonusesApiError(
                f"bonus count endpoint returned {count_response.status} {count_response.status_text}"
            )

        wagering_response = None
        if isinstance(raw.get('wagering'), dict):
            wagering_response = ApiResponse.from_dict(raw['wagering'])
            logging.info(f"[bonuses] Wagering API: {wagering_response.status} {wagering_response.status_text}")

        bonus_count = extract_bonus_count(count_response.data)
        wagering_data = wagering_response.data if wagering_response and wagering_response.ok else None
        bonuses = parse_bonuses(bonus_count, wagering_data)
        logging.info(f"[bonuses] {bonus_count} bonuses reported, {len(bonuses)} records parsed")
        return BonusReport(
            bonus_count=bonus_count,
            bonuses=bonuses,
            count_response=count_response,
            wagering_response=wagering_response,
        )
