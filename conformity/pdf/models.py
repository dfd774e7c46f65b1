from dataclasses import dataclass


@dataclass(frozen=True)
class TextFragment:
    """A positioned piece of document text.

    ordinal_position is the 1-based character offset of the fragment's first
    character within the whole document and defines document order.
    """

    source_label: str
    ordinal_position: int
    content: str


def fragments_from_pages(page_texts: list[str], label_prefix: str) -> list[TextFragment]:
    """Build one fragment per page with cumulative character offsets."""
    fragments: list[TextFragment] = []
    offset = 0
    for index, text in enumerate(page_texts, start=1):
        fragments.append(
            TextFragment(
                source_label=f"{label_prefix}#page-{index}",
                ordinal_position=offset + 1,
                content=text,
            )
        )
        offset += len(text)
    return fragments
