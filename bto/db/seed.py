"""
Load users from CSV seed files.

One file per role, each with the header
    Name, NRIC, Age, Marital Status, Password
Rows with a bad NRIC, age or marital status are skipped and logged.
An empty password cell falls back to the default password.
"""
import os
from typing import Dict, Optional

import pandas as pd
from sqlalchemy.orm import Session

from bto.db.enums import ActorRole, MaritalStatus
from bto.logger import get_logger
from bto.services.user_service import UserService

logger = get_logger(__name__)

SEED_FILES: Dict[ActorRole, str] = {
    ActorRole.APPLICANT: "applicants.csv",
    ActorRole.OFFICER: "hdb_officers.csv",
    ActorRole.MANAGER: "hdb_managers.csv",
}

REQUIRED_COLUMNS = ["Name", "NRIC", "Age", "Marital Status"]


def _parse_marital_status(raw) -> Optional[MaritalStatus]:
    value = str(raw).strip().lower()
    for status in MaritalStatus:
        if status.value == value:
            return status
    return None


def load_users_from_csv(
    db: Session,
    file_path: str,
    role: ActorRole,
    default_password: str,
) -> int:
    '''
    Create one user per valid row of file_path.
    :param db: session, flushed but not committed
    :param file_path: CSV file to read
    :param role: role given to every user of the file
    :param default_password: used when the Password cell is empty
    :return: number of users created
    '''
    df = pd.read_csv(file_path, dtype=str, keep_default_na=False, skipinitialspace=True)
    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{file_path}: missing columns {missing}")

    user_service = UserService(db)
    created = 0
    for index, row in df.iterrows():
        nric = row["NRIC"].strip().upper()
        marital_status = _parse_marital_status(row["Marital Status"])
        try:
            age = int(row["Age"])
        except ValueError:
            logger.warning(f"{file_path} row {index + 2}: invalid age '{row['Age']}', skipped")
            continue
        if marital_status is None:
            logger.warning(f"{file_path} row {index + 2}: invalid marital status, skipped")
            continue
        if user_service.get_user_by_nric(nric) is not None:
            logger.info(f"{file_path} row {index + 2}: {nric} already exists, skipped")
            continue

        password = row.get("Password", "").strip() or default_password
        try:
            user_service.create_user(
                nric=nric,
                name=row["Name"],
                age=age,
                marital_status=marital_status,
                role=role,
                password=password,
            )
        except ValueError as e:
            logger.warning(f"{file_path} row {index + 2}: {e}, skipped")
            continue
        created += 1

    logger.info(f"loaded {created} {role.value}(s) from {file_path}")
    return created


def seed_users(db: Session, seed_dir: str, default_password: str) -> int:
    """Load every role file found in seed_dir and commit."""
    total = 0
    for role, filename in SEED_FILES.items():
        path = os.path.join(seed_dir, filename)
        if not os.path.exists(path):
            logger.info(f"seed file {path} not found, skipped")
            continue
        total += load_users_from_csv(db, path, role, default_password)
    db.commit()
    return total
