"""ID generators."""

import uuid


def generate_id() -> str:
    """Generate a random unique identifier for a collection or document.

    Returns:
        A new UUID4 string (e.g. '1b4e28ba-2fa1-11d2-883f-0016d3cca427').
    """
    return str(uuid.uuid4())
