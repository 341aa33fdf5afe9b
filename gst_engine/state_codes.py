"""GST state code lookup.

Maps Indian state and union territory names, exactly as they appear in
order addresses, to their two-digit GST state codes.
"""

from types import MappingProxyType
from typing import Any, Optional


GST_STATE_CODES = MappingProxyType({
    'Jammu and Kashmir': '01',
    'Himachal Pradesh': '02',
    'Punjab': '03',
    'Chandigarh': '04',
    'Uttarakhand': '05',
    'Haryana': '06',
    'Delhi': '07',
    'Rajasthan': '08',
    'Uttar Pradesh': '09',
    'Bihar': '10',
    'Sikkim': '11',
    'Arunachal Pradesh': '12',
    'Nagaland': '13',
    'Manipur': '14',
    'Mizoram': '15',
    'Tripura': '16',
    'Meghalaya': '17',
    'Assam': '18',
    'West Bengal': '19',
    'Jharkhand': '20',
    'Odisha': '21',
    'Chhattisgarh': '22',
    'Madhya Pradesh': '23',
    'Gujarat': '24',
    'Daman and Diu': '25',
    'Dadra and Nagar Haveli': '26',
    'Maharashtra': '27',
    'Karnataka': '29',
    'Goa': '30',
    'Lakshadweep': '31',
    'Kerala': '32',
    'Tamil Nadu': '33',
    'Puducherry': '34',
    'Andaman and Nicobar Islands': '35',
    'Telangana': '36',
    'Andhra Pradesh': '37',
    'Ladakh': '38',
})

STATE_CODE_TO_NAME = MappingProxyType(
    {code: name for name, code in GST_STATE_CODES.items()}
)


def resolve_state_code(state_name: Any) -> Optional[str]:
    """Get the GST state code for a state name.

    Matching is exact and case-sensitive; names are not normalized.

    Args:
        state_name: State name as found on the address.

    Returns:
        The two-digit code, or None for unknown or missing names.
    """
    if not isinstance(state_name, str):
        return None
    return GST_STATE_CODES.get(state_name)


def state_name_for_code(state_code: Any) -> Optional[str]:
    """Get the state name for a two-digit GST state code."""
    if not isinstance(state_code, str):
        return None
    return STATE_CODE_TO_NAME.get(state_code)


def is_valid_state_code(state_code: Any) -> bool:
    return state_name_for_code(state_code) is not None


def is_valid_state_name(state_name: Any) -> bool:
    return resolve_state_code(state_name) is not None
