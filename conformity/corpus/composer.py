from conformity.pdf.models import TextFragment

FRAGMENT_SEPARATOR = "\n\n"


def compose_corpus(fragments: list[TextFragment]) -> str:
    """Merge fragments into one corpus in ordinal order.

    Blank fragments are dropped; an all-blank input yields "".
    """
    ordered = sorted(fragments, key=lambda fragment: fragment.ordinal_position)
    parts = [fragment.content.strip() for fragment in ordered]
    return FRAGMENT_SEPARATOR.join(part for part in parts if part).strip()
