"""
Setup verification script for the StudySync backend.
Checks dependencies, configuration and external services before first run.

    python verify_setup.py
"""
import asyncio
import os
import sys
from typing import Callable, List, Tuple

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"


def print_status(message: str, status: bool):
    """Print colored status message."""
    symbol = f"{GREEN}✓{RESET}" if status else f"{RED}✗{RESET}"
    print(f"{symbol} {message}")


async def check_python_version() -> bool:
    """Check Python version is 3.11+."""
    version = sys.version_info
    ok = version >= (3, 11)
    print_status(
        f"Python version: {version.major}.{version.minor}.{version.micro}"
        + ("" if ok else " (requires 3.11+)"),
        ok,
    )
    return ok


async def check_dependencies() -> bool:
    """Check that every runtime package imports."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "sqlalchemy",
        "asyncpg",
        "aiosqlite",
        "httpx",
        "aiofiles",
        "multipart",
        "fitz",
        "docx",
        "pytesseract",
        "PIL",
        "qrcode",
        "icalendar",
    ]

    all_installed = True
    for package in required_packages:
        try:
            __import__(package)
            print_status(f"Package '{package}' installed", True)
        except ImportError:
            print_status(f"Package '{package}' missing", False)
            all_installed = False

    return all_installed


async def check_env_file() -> bool:
    """A .env file is optional; defaults work for local development."""
    exists = os.path.exists(".env")
    if exists:
        print_status(".env file exists", True)
    else:
        print(f"  {YELLOW}No .env file; using built-in defaults{RESET}")
    return True


async def check_upload_dir() -> bool:
    from studysync.config import settings

    path = os.path.abspath(settings.UPLOAD_DIR)
    if os.path.isdir(path):
        writable = os.access(path, os.W_OK)
        print_status(f"Upload directory {path} {'is writable' if writable else 'is NOT writable'}", writable)
        return writable
    print(f"  {YELLOW}Upload directory {path} missing (will be created on startup){RESET}")
    return True


async def check_database() -> bool:
    """Connect with the configured DATABASE_URL and run SELECT 1."""
    from sqlalchemy import text

    from studysync.database import close_db, engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print_status(f"Database reachable ({engine.url.render_as_string(hide_password=True)})", True)
        return True
    except Exception as e:
        print_status(f"Database connection failed: {e}", False)
        print(f"  {YELLOW}Check DATABASE_URL in .env{RESET}")
        return False
    finally:
        await close_db()


async def check_gemini() -> bool:
    from studysync.services.gemini import GeminiService

    gemini = GeminiService()
    if not gemini.api_key:
        print_status("GEMINI_API_KEY not set (AI features will return fallback messages)", False)
        return False
    ok = await gemini.check_health()
    print_status("Gemini API key accepted" if ok else "Gemini API unreachable or key rejected", ok)
    return ok


async def check_tesseract() -> bool:
    """OCR scanning needs the tesseract binary."""
    import pytesseract

    from studysync.config import settings

    if settings.TESSERACT_CMD:
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD
    try:
        version = pytesseract.get_tesseract_version()
        print_status(f"Tesseract {version} found", True)
        return True
    except Exception as e:
        print_status(f"Tesseract not available: {e}", False)
        print(f"  {YELLOW}Install tesseract-ocr or set TESSERACT_CMD{RESET}")
        return False


async def main():
    """Run all verification checks."""
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}StudySync Backend - Setup Verification{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

    checks: List[Tuple[str, Callable]] = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Environment File", check_env_file),
        ("Upload Directory", check_upload_dir),
        ("Database", check_database),
        ("Gemini API", check_gemini),
        ("Tesseract OCR", check_tesseract),
    ]

    results = []

    for check_name, check_func in checks:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            result = await check_func()
            results.append(result)
        except Exception as e:
            print_status(f"Error during check: {e}", False)
            results.append(False)

    # Summary
    print(f"\n{BLUE}{'='*60}{RESET}")
    passed = sum(results)
    total = len(results)

    if passed == total:
        print(f"{GREEN}✓ All checks passed! ({passed}/{total}){RESET}")
        print(f"\n{GREEN}You're ready to run the backend:{RESET}")
        print("  uvicorn studysync.main:app --reload")
    else:
        print(f"{RED}✗ Some checks failed ({passed}/{total} passed){RESET}")
        print(f"\n{YELLOW}Please fix the issues above before running the backend.{RESET}")
        sys.exit(1)

    print(f"{BLUE}{'='*60}{RESET}\n")


if __name__ == "__main__":
    asyncio.run(main())
