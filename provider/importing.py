from typing import Tuple

from provider.errors import ProviderError


def parse_import_id(import_id: str, kind: str) -> Tuple[str, str]:
    """Split a ``namespace,name`` import identifier."""
    parts = import_id.split(",")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ProviderError(
            "Unexpected Import Identifier",
            f"Expected import identifier with format: namespace,{kind}Name. Got: {import_id!r}",
        )
    return parts[0], parts[1]
