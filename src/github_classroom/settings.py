import os

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///classroom.db"


def get_github_token() -> str:
    env_vars: set[str] = {"GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN"}
    for env_var in env_vars:
        if env_var in os.environ:
            return os.environ[env_var]
    msg = "GITHUB_TOKEN or GITHUB_PERSONAL_ACCESS_TOKEN must be set"
    raise ValueError(msg)


def get_github_client_id() -> str | None:
    return os.getenv("GITHUB_CLIENT_ID")


def get_github_client_secret() -> str | None:
    return os.getenv("GITHUB_CLIENT_SECRET")


def get_database_url() -> str:
    return os.getenv("CLASSROOM_DATABASE_URL", DEFAULT_DATABASE_URL)
