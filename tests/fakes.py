"""In-memory stand-in for the parts of the Supabase client the services use."""
import copy
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)

PRIMARY_KEYS = {
    "teams": "team_id",
    "evaluation": "queue_id",
}
UNIQUE_COLUMNS = {
    "teams": ("team_id", "team_name"),
}


class FakeResponse:
    def __init__(self, data: Any, count: Optional[int] = None):
        self.data = data
        self.count = count


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.columns = "*"
        self.count_mode = None
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orderings: List[tuple] = []
        self.limit_value: Optional[int] = None
        self.single_mode: Optional[str] = None

    # Builders

    def select(self, columns: str = "*", count: Optional[str] = None):
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self, count: Optional[str] = None):
        self.action = "delete"
        self.count_mode = count
        return self

    def eq(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def gte(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def lt(self, column: str, value: Any):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) < value)
        return self

    def in_(self, column: str, values: List[Any]):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column: str, value: Any):
        expected = None if value in (None, "null") else value
        self.filters.append(lambda row: row.get(column) is expected)
        return self

    def order(self, column: str, desc: bool = False, nullsfirst: bool = False, **_):
        self.orderings.append((column, desc, nullsfirst))
        return self

    def limit(self, size: int, **_):
        self.limit_value = size
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe_single"
        return self

    # Execution

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(check(row) for check in self.filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",") if name.strip()]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def _sorted(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # Apply orderings last-to-first so the first ordering wins
        for column, desc, nullsfirst in reversed(self.orderings):
            present = [r for r in rows if r.get(column) is not None]
            missing = [r for r in rows if r.get(column) is None]
            present.sort(key=lambda r: r[column], reverse=desc)
            rows = missing + present if nullsfirst else present + missing
        return rows

    def execute(self) -> FakeResponse:
        self.db.executed.append((self.table_name, self.action))
        error = self.db.errors.get((self.table_name, self.action))
        if error is not None:
            raise error

        rows = self.db.tables.setdefault(self.table_name, [])
        if self.action == "insert":
            return self._execute_insert(rows)
        if self.action == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)
        if self.action == "delete":
            kept = [row for row in rows if not self._matches(row)]
            deleted = [row for row in rows if self._matches(row)]
            self.db.tables[self.table_name] = kept
            return FakeResponse(deleted, len(deleted) if self.count_mode else None)

        selected = self._sorted([row for row in rows if self._matches(row)])
        total = len(selected)
        if self.limit_value is not None:
            selected = selected[:self.limit_value]
        data = [self._project(row) for row in selected]
        count = total if self.count_mode else None
        if self.single_mode == "maybe_single":
            return FakeResponse(data[0] if data else None, count)
        if self.single_mode == "single":
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return FakeResponse(data[0], count)
        return FakeResponse(data, count)

    def _execute_insert(self, rows: List[Dict[str, Any]]) -> FakeResponse:
        payload = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = []
        for item in payload:
            row = copy.deepcopy(item)
            key = PRIMARY_KEYS.get(self.table_name, "id")
            row.setdefault(key, str(uuid.uuid4()))
            row.setdefault("created_at", self.db.next_timestamp())
            for column in UNIQUE_COLUMNS.get(self.table_name, ()):
                if any(existing.get(column) == row.get(column) for existing in rows):
                    raise Exception(f'duplicate key value violates unique constraint "{self.table_name}_{column}_key"')
            rows.append(row)
            inserted.append(copy.deepcopy(row))
        return FakeResponse(inserted)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.db.rpc_calls.append(self.name)
        handler = self.db.rpc_handlers.get(self.name)
        if handler is None:
            raise Exception(f"function {self.name} does not exist")
        return FakeResponse(handler(self.db, self.params))


class FakeBucket:
    def __init__(self, db: "FakeSupabase", name: str):
        self.db = db
        self.name = name

    def upload(self, path: str, content: bytes, file_options: Optional[Dict[str, Any]] = None):
        self.db.uploads[f"{self.name}/{path}"] = content
        return {"Key": f"{self.name}/{path}"}


class FakeStorage:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self.db, bucket)


def calculate_team_ranks(db: "FakeSupabase", params: Dict[str, Any]):
    """Rank teams by r1 + r2, highest first"""
    teams = db.tables.setdefault("teams", [])
    ordered = sorted(teams, key=lambda t: -((t.get("r1_score") or 0) + (t.get("r2_score") or 0)))
    for position, team in enumerate(ordered, start=1):
        team["rank"] = position
    return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.errors: Dict[tuple, Exception] = {}
        self.executed: List[tuple] = []
        self.rpc_calls: List[str] = []
        self.rpc_handlers = {"calculate_team_ranks": calculate_team_ranks}
        self.uploads: Dict[str, bytes] = {}
        self.storage = FakeStorage(self)
        self._clock = 0

    def next_timestamp(self) -> str:
        self._clock += 1
        return (BASE_TIME + timedelta(seconds=self._clock)).isoformat()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    def fail(self, table: str, action: str, error: Exception) -> None:
        """Make every `action` on `table` raise `error`"""
        self.errors[(table, action)] = error

    def seed(self, table: str, *rows: Dict[str, Any]) -> List[Dict[str, Any]]:
        return FakeQuery(self, table).insert(list(rows)).execute().data

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])


def make_team(team_id: str, team_name: Optional[str] = None, **fields) -> Dict[str, Any]:
    team = {
        "team_id": team_id,
        "team_name": team_name or f"{team_id.lower()}@igifosscit",
        "player1_name": "Ada",
        "player2_name": "Linus",
        "phone_no": "9000000000",
        "password": "IGI-025",
        "r1_score": 0,
        "r1_submission_time": None,
        "r2_score": 0,
        "r2_submission_time": None,
        "round3_1_score": None,
        "round3_2_score": None,
        "round3_3_score": None,
        "rank": None,
    }
    team.update(fields)
    return team
