import sqlite3
import json
import logging
from typing import Dict, List, Optional, Any
from .importers import case_inputs_from_record, case_inputs_to_record
from .models import CaseInputs

logger = logging.getLogger(__name__)


class CaseDatabase:
    """Database manager for case persistence."""

    def __init__(self, db_path: str = "econloss_cases.db"):
        self.db_path = db_path
        self.init_database()

    def init_database(self):
        """Initialize the database with required tables."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()

                cursor.execute('''
                    CREATE TABLE IF NOT EXISTS cases (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT UNIQUE NOT NULL,
                        case_info TEXT NOT NULL,      -- JSON object
                        earnings_params TEXT NOT NULL,
                        hh_services TEXT NOT NULL,
                        lcp_items TEXT NOT NULL,      -- JSON array
                        past_actuals TEXT NOT NULL,
                        is_union_mode BOOLEAN NOT NULL DEFAULT 0,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                ''')
                cursor.execute('CREATE INDEX IF NOT EXISTS idx_cases_name ON cases (name)')

                conn.commit()
                logger.debug("Database initialized successfully")

        except sqlite3.Error as e:
            logger.error(f"Error initializing database: {e}")
            raise

    def save_case(self, name: str, inputs: CaseInputs) -> int:
        """Save a case, replacing any existing case with the same name."""
        record = case_inputs_to_record(inputs)
        columns = (
            json.dumps(record["case_info"]),
            json.dumps(record["earnings_params"]),
            json.dumps(record["hh_services"]),
            json.dumps(record["lcp_items"]),
            json.dumps(record["past_actuals"]),
            record["is_union_mode"],
        )

        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()

                cursor.execute('SELECT id FROM cases WHERE name = ?', (name,))
                case_row = cursor.fetchone()

                if case_row:
                    case_id = case_row[0]
                    cursor.execute('''
                        UPDATE cases
                        SET case_info = ?, earnings_params = ?, hh_services = ?, lcp_items = ?,
                            past_actuals = ?, is_union_mode = ?, updated_at = CURRENT_TIMESTAMP
                        WHERE id = ?
                    ''', columns + (case_id,))
                else:
                    cursor.execute('''
                        INSERT INTO cases (name, case_info, earnings_params, hh_services, lcp_items,
                                           past_actuals, is_union_mode)
                        VALUES (?, ?, ?, ?, ?, ?, ?)
                    ''', (name,) + columns)
                    case_id = cursor.lastrowid

                conn.commit()
                logger.info(f"Case saved successfully: {name}")
                return case_id

        except sqlite3.Error as e:
            logger.error(f"Error saving case: {e}")
            raise

    def load_case(self, name: str) -> Optional[CaseInputs]:
        """Load a case by name, merging the stored record over current defaults."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute('''
                    SELECT case_info, earnings_params, hh_services, lcp_items, past_actuals, is_union_mode
                    FROM cases WHERE name = ?
                ''', (name,))
                case_row = cursor.fetchone()

        except sqlite3.Error as e:
            logger.error(f"Error loading case: {e}")
            raise

        if not case_row:
            return None

        record: Dict[str, Any] = {"is_union_mode": bool(case_row[5])}
        for key, raw in zip(("case_info", "earnings_params", "hh_services", "lcp_items", "past_actuals"),
                            case_row[:5]):
            # A corrupted column falls back to defaults for that section only
            try:
                record[key] = json.loads(raw)
            except (json.JSONDecodeError, TypeError):
                logger.warning(f"Corrupted {key} for case {name!r}, using defaults")

        logger.info(f"Case loaded: {name}")
        return case_inputs_from_record(record)

    def list_cases(self) -> List[Dict[str, Any]]:
        """List saved cases, most recently updated first."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute('''
                    SELECT id, name, case_info, created_at, updated_at
                    FROM cases ORDER BY updated_at DESC, id DESC
                ''')
                rows = cursor.fetchall()

        except sqlite3.Error as e:
            logger.error(f"Error listing cases: {e}")
            raise

        cases = []
        for row in rows:
            try:
                plaintiff = json.loads(row[2]).get("plaintiff", "")
            except (json.JSONDecodeError, TypeError, AttributeError):
                plaintiff = ""
            cases.append({
                "id": row[0],
                "name": row[1],
                "plaintiff": plaintiff,
                "created_at": row[3],
                "updated_at": row[4],
            })
        return cases

    def delete_case(self, name: str) -> bool:
        """Delete a case by name. Returns True if found and deleted."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute('DELETE FROM cases WHERE name = ?', (name,))
                conn.commit()
                deleted = cursor.rowcount > 0

        except sqlite3.Error as e:
            logger.error(f"Error deleting case: {e}")
            raise

        if deleted:
            logger.info(f"Case deleted: {name}")
        return deleted
