"""Static file contents written into a freshly scaffolded project."""

from app.constants import PLACEHOLDER_JWT_SECRET

# Sub-packages created under src/<package>/
PACKAGE_LAYERS = ("routes", "services", "models", "schemas", "middleware")

BASE_DEPENDENCIES = [
    "fastapi>=0.110",
    "uvicorn[standard]>=0.27",
    "sqlalchemy[asyncio]>=2.0",
    "aiosqlite>=0.20",
    "pydantic-settings>=2.0",
    "python-jose[cryptography]>=3.3",
    "bcrypt>=4.0",
]

TEST_DEPENDENCIES = [
    "pytest>=8.0",
    "pytest-asyncio>=0.23",
    "httpx>=0.27",
]

ENV_EXAMPLE = f"""\
# Copy to .env and fill in real values
DATABASE_URL=sqlite+aiosqlite:///./dev.db
JWT_SECRET={PLACEHOLDER_JWT_SECRET}
LOG_LEVEL=INFO
"""

GITIGNORE = """\
__pycache__/
*.py[cod]
.venv/
.env
*.db
.pytest_cache/
dist/
build/
*.egg-info/
"""

MAIN_PY = '''\
"""{name} — FastAPI entry point (run with: uvicorn {package}.main:app --reload)."""

from fastapi import FastAPI

app = FastAPI(title="{name}")


@app.get("/health")
async def health() -> dict:
    return {{"status": "healthy"}}
'''

TEST_HEALTH_PY = '''\
import pytest
from httpx import ASGITransport, AsyncClient

from {package}.main import app


@pytest.mark.asyncio
async def test_health():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {{"status": "healthy"}}
'''


def render_main(name: str, package: str) -> str:
    return MAIN_PY.format(name=name, package=package)


def render_health_test(package: str) -> str:
    return TEST_HEALTH_PY.format(package=package)
