from typing import Any, Dict, List


ACS_HEADER = [
    "NAME",
    "B25064_001E",
    "B25077_001E",
    "B25103_001E",
    "B25141_001E",
    "metropolitan statistical area/micropolitan statistical area",
]


class FakeResponse:
    def __init__(self, payload: Any) -> None:
        self.payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> Any:
        return self.payload


class FakeSession:
    def __init__(self, payload: Any) -> None:
        self.payload = payload
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, params: Dict[str, Any], timeout: int) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return FakeResponse(self.payload)


class FakeQueryJob:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self.rows = rows

    def result(self) -> List[Dict[str, Any]]:
        return self.rows


class FakeBigQueryClient:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self.rows = rows
        self.queries: List[str] = []

    def query(self, query: str, job_config: Any = None) -> FakeQueryJob:
        self.queries.append(query)
        return FakeQueryJob(self.rows)

