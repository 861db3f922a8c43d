"""
Shared query logic for the Drill AI API.
Store operations for wells, their uploaded record sets and chat transcripts.
Every mutating function commits before returning.
"""

import logging
import string
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from drill_ai.models import ACTIVE_STATUS, DEFAULT_STATUS, ChatMessage, Well, WellData, utc_now
from drill_ai.parser import Record, to_number


logger = logging.getLogger(__name__)

DEFAULT_WELL_NAME = "Well A"

# Keys scanned when deriving a well's depth from its records
WELL_DEPTH_KEYS = ("Depth", "depth", "DEPTH")


def next_well_name(existing: Iterable[str]) -> str:
    """
    Pick the display name for a new well: the first free 'Well <letter>'.

    Falls back to 'Well <n>' once every letter is taken.
    """
    taken = set(existing)
    for letter in string.ascii_uppercase:
        name = f"Well {letter}"
        if name not in taken:
            return name

    n = len(string.ascii_uppercase) + 1
    while f"Well {n}" in taken:
        n += 1
    return f"Well {n}"


def compute_max_depth(records: List[Record]) -> Optional[float]:
    """
    Maximum depth across a record set.

    Looks at every value stored under a depth key, ignoring anything that is
    not a finite number.

    Returns:
        The maximum depth, or None if no record carries a usable depth
    """
    depths = []
    for record in records:
        for key in WELL_DEPTH_KEYS:
            if key in record:
                number = to_number(record[key])
                if number is not None:
                    depths.append(number)

    if not depths:
        return None
    return max(depths)


async def get_well(session: AsyncSession, name: str) -> Optional[Well]:
    """Get a well by display name."""
    result = await session.execute(select(Well).where(Well.name == name))
    return result.scalar_one_or_none()


async def count_wells(session: AsyncSession) -> int:
    result = await session.execute(select(func.count(Well.id)))
    return result.scalar() or 0


async def load_wells(session: AsyncSession) -> List[Well]:
    """
    Return all wells in creation order.

    An empty store is seeded with the default well so the dashboard always has
    something to select.
    """
    result = await session.execute(select(Well).order_by(Well.id))
    wells = list(result.scalars().all())

    if not wells:
        default_well = Well(name=DEFAULT_WELL_NAME, depth=0, status=DEFAULT_STATUS)
        session.add(default_well)
        await session.commit()
        await session.refresh(default_well)
        logger.info("✓ Seeded default well '%s'", DEFAULT_WELL_NAME)
        wells = [default_well]

    return wells


async def create_well(session: AsyncSession, name: Optional[str] = None) -> Well:
    """
    Add a new well with no data.

    Args:
        session: Database session
        name: Display name; generated when omitted

    Returns:
        The created well
    """
    if not name:
        result = await session.execute(select(Well.name))
        name = next_well_name(result.scalars().all())

    well = Well(name=name, depth=0, status=DEFAULT_STATUS)
    session.add(well)
    await session.commit()
    await session.refresh(well)
    logger.info("✓ Created well '%s'", name)
    return well


async def delete_well(session: AsyncSession, name: str) -> Dict[str, int]:
    """
    Delete a well together with its record set and chat transcript.

    Returns:
        Counts of deleted rows per table
    """
    data_result = await session.execute(delete(WellData).where(WellData.well_name == name))
    message_result = await session.execute(delete(ChatMessage).where(ChatMessage.well_name == name))
    well_result = await session.execute(delete(Well).where(Well.name == name))
    await session.commit()

    logger.info(
        "Deleted well '%s' (%d record sets, %d messages)",
        name, data_result.rowcount, message_result.rowcount
    )
    return {
        "wells": well_result.rowcount,
        "record_sets": data_result.rowcount,
        "messages": message_result.rowcount,
    }


async def get_well_data(session: AsyncSession, name: str) -> Optional[WellData]:
    result = await session.execute(select(WellData).where(WellData.well_name == name))
    return result.scalar_one_or_none()


async def get_well_records(session: AsyncSession, name: str) -> List[Record]:
    """Canonical records currently stored for a well (empty if never uploaded)."""
    well_data = await get_well_data(session, name)
    if not well_data:
        return []
    return list(well_data.records)


async def replace_well_data(
    session: AsyncSession,
    well: Well,
    parsed: Dict[str, Any],
    source_filename: str
) -> Well:
    """
    Replace a well's record set with a freshly parsed upload.

    Side effects on the well:
    - non-empty records: status becomes Active; depth becomes the maximum depth
      found, or keeps its previous value when no depth can be read
    - empty records: depth resets to 0, status is left alone

    Args:
        session: Database session
        well: Well receiving the data
        parsed: Result of parser.parse_upload
        source_filename: Original filename of the upload

    Returns:
        The updated well
    """
    records = parsed["records"]

    well_data = await get_well_data(session, well.name)
    if well_data:
        well_data.records = records
        well_data.headers = parsed.get("headers", [])
        well_data.source_filename = source_filename
        well_data.ingest_timestamp = utc_now()
    else:
        well_data = WellData(
            well_name=well.name,
            source_filename=source_filename,
            records=records,
            headers=parsed.get("headers", [])
        )
        session.add(well_data)

    if records:
        max_depth = compute_max_depth(records)
        if max_depth is not None:
            well.depth = max_depth
        well.status = ACTIVE_STATUS
    else:
        well.depth = 0

    session.add(well)
    await session.commit()
    await session.refresh(well)

    logger.info(
        "✓ Replaced data for '%s': %d records from '%s' (depth=%s, status=%s)",
        well.name, len(records), source_filename, well.depth, well.status
    )
    return well


async def get_messages(session: AsyncSession, well_name: str) -> List[ChatMessage]:
    """A well's chat transcript in the order it was written."""
    stmt = select(ChatMessage).where(ChatMessage.well_name == well_name).order_by(ChatMessage.seq)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def append_message(
    session: AsyncSession,
    well_name: str,
    role: str,
    content: str,
    attachments: Optional[List[Dict[str, Any]]] = None
) -> ChatMessage:
    """Append one message to a well's transcript."""
    message = ChatMessage(
        well_name=well_name,
        role=role,
        content=content,
        attachments=attachments or None
    )
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message
