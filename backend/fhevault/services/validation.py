from typing import Any, Dict, List

# field -> (min, max), inclusive
STRATEGY_BOUNDS = {
    'riskLevel': (1, 10),
    'allocation': (0, 100),
    'timeframe': (1, 365),
}
ENCRYPTED_FIELDS = ('encryptedData', 'encryptedHash')


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_strategy_input(data: Any) -> List[Dict[str, str]]:
    """Check the three strategy parameters against their bounds.

    Returns a list of ``{'field', 'message'}`` details, empty when valid.
    """
    if not isinstance(data, dict):
        return [{'field': 'body', 'message': 'Expected a JSON object'}]
    errors = []
    for field, (low, high) in STRATEGY_BOUNDS.items():
        value = data.get(field)
        if value is None:
            errors.append({'field': field, 'message': 'Required'})
        elif not _is_int(value):
            errors.append({'field': field, 'message': 'Expected an integer'})
        elif not low <= value <= high:
            errors.append({'field': field, 'message': f'Must be between {low} and {high}'})
    return errors


def validate_submission(data: Any) -> List[Dict[str, str]]:
    errors = validate_strategy_input(data)
    if not isinstance(data, dict):
        return errors
    for field in ENCRYPTED_FIELDS:
        value = data.get(field)
        if not isinstance(value, str) or not value:
            errors.append({'field': field, 'message': 'Expected a non-empty string'})
    return errors
