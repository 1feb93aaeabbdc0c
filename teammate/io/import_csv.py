"""CSV import utilities for participant records."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import pandas as pd
from sqlalchemy.orm import Session

from teammate.domain.models import Participant
from teammate.domain.repositories import ParticipantRepository
from teammate.domain.roster import Candidate
from teammate.exceptions import InvalidDataError

REQUIRED_COLUMNS = [
    "id",
    "name",
    "email",
    "preferredgame",
    "skilllevel",
    "preferredrole",
    "personalityscore",
]


def _normalize_column(name: str) -> str:
    return str(name).lower().strip().replace("_", "").replace(" ", "")


def parse_participant(row: Dict[str, str]) -> Candidate:
    """
    Build a Candidate from one CSV row (normalized column names).

    Raises:
        InvalidDataError: If required fields are missing or out of range
    """
    participant_id = str(row.get("id", "")).strip()
    name = str(row.get("name", "")).strip()
    email = str(row.get("email", "")).strip()
    if not participant_id or not name or not email:
        raise InvalidDataError("Missing required fields")

    try:
        skill_level = int(str(row.get("skilllevel", "")).strip())
        personality_score = int(str(row.get("personalityscore", "")).strip())
    except ValueError:
        raise InvalidDataError("Invalid number format") from None

    if skill_level < 1 or skill_level > 10:
        raise InvalidDataError(f"Invalid skill level: {skill_level}")
    if personality_score < 0 or personality_score > 100:
        raise InvalidDataError(f"Invalid personality score: {personality_score}")

    return Candidate(
        candidate_id=participant_id,
        name=name,
        email=email,
        skill_level=skill_level,
        personality_score=personality_score,
        preferred_game=str(row.get("preferredgame", "")).strip(),
        preferred_role=str(row.get("preferredrole", "")).strip(),
    )


def read_participants_csv(csv_path: str | Path) -> List[Candidate]:
    """
    Read participants from CSV, skipping invalid rows.

    Args:
        csv_path: Path to participants CSV

    Returns:
        List of Candidates in file order

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidDataError: If columns are missing or no row is valid
    """
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, skip_blank_lines=True)

    # Normalize column names
    df.columns = [_normalize_column(c) for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise InvalidDataError(f"Missing columns in {csv_path}: {missing}")

    candidates = []
    for line_no, row in enumerate(df.to_dict(orient="records"), start=2):
        try:
            candidates.append(parse_participant(row))
        except InvalidDataError as e:
            print(f"[WARN] Skipping invalid data on line {line_no}: {e}")

    if not candidates:
        raise InvalidDataError(f"No valid participants found in {csv_path}")
    return candidates


def import_participants_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import participants from CSV into database (existing ids are replaced).

    Args:
        session: Database session
        csv_path: Path to participants CSV

    Returns:
        Number of participants imported
    """
    candidates = read_participants_csv(csv_path)
    count = ParticipantRepository.upsert_many(
        session, [Participant.from_candidate(c) for c in candidates]
    )
    print(f"[INFO] Imported {count} participants from {csv_path}")
    return count
