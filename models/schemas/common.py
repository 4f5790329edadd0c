from marshmallow import ValidationError


def strip_strings(data, *keys):
    """Return a copy of a request payload with the given string fields trimmed."""
    if not isinstance(data, dict):
        raise ValidationError("Corpo da requisição inválido")
    out = dict(data)
    for key in keys:
        if isinstance(out.get(key), str):
            out[key] = out[key].strip()
    return out


def first_error(messages) -> str:
    """Pick the first human message out of a marshmallow error tree."""
    if isinstance(messages, str):
        return messages
    if isinstance(messages, list):
        return first_error(messages[0]) if messages else "Dados inválidos"
    if isinstance(messages, dict):
        for value in messages.values():
            return first_error(value)
    return "Dados inválidos"
