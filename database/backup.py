'''
    File Name: backup.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
import csv
import json
import logging
from pathlib import Path

import config
from core.indicators import category_names, resolve_category_name
from database.repositories import Snapshot, UserRepositories
from models.transaction import parse_amount

logger = logging.getLogger(__name__)

CSV_FIELDS = ["date", "type", "frequency", "amount", "category", "group", "subgroup", "establishment", "description"]


def export_transactions_csv(snapshot: Snapshot, path: Path) -> bool:
    """Export transactions to a CSV file at `path` with references resolved to names."""
    cat_names = category_names(snapshot.categories)
    group_names = {g.id: g.name for g in snapshot.groups}
    subgroup_names = {s.id: s.name for s in snapshot.subgroups}
    est_names = {e.id: e.name for e in snapshot.establishments}
    na = config.MISSING_REFERENCE_LABEL
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for tx in snapshot.transactions:
                amount = parse_amount(tx.amount)
                writer.writerow({
                    "date": tx.date.isoformat() if hasattr(tx.date, "isoformat") else tx.date,
                    "type": tx.type,
                    "frequency": tx.frequency,
                    "amount": f"{amount:.2f}" if amount is not None else "",
                    "category": resolve_category_name(tx.category_id, cat_names, default=na),
                    "group": group_names.get(tx.group_id, na),
                    "subgroup": subgroup_names.get(tx.subgroup_id, na),
                    "establishment": est_names.get(tx.establishment_id, na),
                    "description": tx.description,
                })
        return True
    except Exception:
        logger.exception("Failed exporting transactions to CSV %s", path)
        return False


def backup_to_json(repos: UserRepositories, path: Path) -> bool:
    """Write every stored collection of the user to one JSON document."""
    payload = {}
    for key in repos.stored_keys():
        raw = repos.store.get(key)
        if not raw:
            continue
        try:
            payload[key] = json.loads(raw)
        except ValueError:
            logger.warning("Key %s does not hold JSON; left out of the backup", key)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        return True
    except Exception:
        logger.exception("Failed writing backup to %s", path)
        return False


def restore_from_json(repos: UserRepositories, path: Path) -> int:
    """Restore a backup written by `backup_to_json`. Returns the number of keys restored.

    Keys that belong to another user are skipped.
    """
    count = 0
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except Exception:
        logger.exception("Failed reading backup %s", path)
        return count

    if not isinstance(data, dict):
        logger.error("Backup %s is not a JSON object", path)
        return count

    allowed = set(repos.storage_keys())
    for key, value in data.items():
        if key not in allowed:
            logger.warning("Key %s does not belong to %s; skipping", key, repos.user_email)
            continue
        if repos.store.set(key, json.dumps(value, ensure_ascii=False)):
            count += 1
    return count


def reset_user_data(repos: UserRepositories) -> int:
    """Delete every stored collection of the user. Returns the number of keys removed."""
    removed = repos.store.remove(repos.stored_keys())
    logger.info("Removed %d keys for %s", removed, repos.user_email)
    return removed
