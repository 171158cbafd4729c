"""Display order for publication lists.

Posts are listed most recent first. Within one year they are ordered by
entry type and then alphabetically by the lead person's family name, so
readers can scan a year block by name.
"""

from collections.abc import Mapping

from .models import Record, extract_year


def lead_name(record: Record) -> str:
    """Family name of the first author, else of the first editor.

    Returns an empty string when the post has neither.
    """
    persons = record.persons
    if not persons:
        return ""
    return persons[0].family


def sort_key(record: Record) -> tuple[str, str, str]:
    """Sort key components: year, entry type, lead name."""
    return (extract_year(record).text, record.type, lead_name(record))


def sort_record_ids(records: Mapping[str, Record]) -> list[str]:
    """Order post ids for display.

    The year is compared descending, type and lead name ascending. Both
    passes are stable, so the second (year) pass keeps the type/name order
    of the first inside each year. Remaining ties fall back to the post id.
    """
    keys = {post_id: sort_key(record) for post_id, record in records.items()}

    ids = sorted(keys, key=lambda post_id: (keys[post_id][1:], post_id))
    ids.sort(key=lambda post_id: keys[post_id][0], reverse=True)
    return ids
