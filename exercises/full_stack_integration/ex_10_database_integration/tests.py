"""Legacy layout: a bare ``run_tests`` returning result dicts."""

TITLE = "Database Integration"

_REQUIREMENTS = [
    (
        "DatabaseProvider should be implemented",
        [
            (lambda code: "DatabaseProvider" in code, "DatabaseProvider component not found"),
            (lambda code: "TODO" not in code, "DatabaseProvider contains TODO comments - implementation incomplete"),
            (
                lambda code: "createContext" in code or "useState" in code,
                "DatabaseProvider should use React hooks for state management",
            ),
        ],
    ),
    (
        "Database connection management should be implemented",
        [
            (lambda code: "connect" in code and "disconnect" in code, "Database connection methods not implemented"),
            (lambda code: "retryCount" in code and "baseDelay" in code, "Connection retry logic with exponential backoff not implemented"),
        ],
    ),
    (
        "QueryBuilder component should be implemented",
        [
            (lambda code: "QueryBuilder" in code, "QueryBuilder component not found"),
            (lambda code: "select" in code and "where" in code, "QueryBuilder should support select and where clauses"),
        ],
    ),
]


def run_tests(compiled_code):
    results = []
    for name, checks in _REQUIREMENTS:
        error = next((message for check, message in checks if not check(compiled_code)), None)
        results.append({"name": name, "passed": error is None, "error": error, "executionTime": 1})
    return results
