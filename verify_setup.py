"""
Setup verification script for the WordWise backend.
Checks all dependencies and services are properly configured.
"""
import asyncio
import sys
import os
from typing import List, Tuple

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
    if version.major == 3 and version.minor >= 11:
        print_status(f"Python version: {version.major}.{version.minor}.{version.micro}", True)
        return True
    else:
        print_status(f"Python version {version.major}.{version.minor} (requires 3.11+)", False)
        return False


async def check_dependencies() -> bool:
    """Check if required packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "sqlalchemy",
        "asyncpg",
        "pydantic_settings",
        "httpx",
        "multipart",
        "PIL",
        "reportlab",
        "alembic",
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
    """Check if .env file exists."""
    if os.path.exists(".env"):
        print_status(".env file exists", True)
        return True
    else:
        print_status(".env file missing (settings fall back to defaults)", False)
        return False


async def check_rendering() -> bool:
    """Check Pillow can draw a slide and reportlab can build a PDF."""
    try:
        from app.services.image_generator import render_slide_png
        from app.services.pdf_export import PdfSlide, generate_carousel_pdf

        png = render_slide_png("Setup check", 1, "STORY")
        print_status(f"Slide image rendered ({len(png)} bytes)", True)

        pdf = generate_carousel_pdf([PdfSlide(1, "Setup check", png)], "Setup check")
        print_status(f"PDF built ({len(pdf.content)} bytes)", True)
        return True
    except Exception as e:
        print_status(f"Rendering failed: {str(e)}", False)
        print(f"  {YELLOW}Install a TrueType font (e.g. fonts-dejavu) for better slide text{RESET}")
        return False


async def check_openai() -> bool:
    """Check the OpenAI-compatible endpoint accepts the configured key."""
    try:
        from app.config import settings
        from app.services.openai_client import OpenAIChatService

        if not settings.llm_configured:
            print_status("OPENAI_API_KEY not set", False)
            print(f"  {YELLOW}Grammar checking and slide generation need an API key{RESET}")
            return False

        reachable = await OpenAIChatService().check_health()
        print_status(f"LLM endpoint {settings.OPENAI_BASE_URL}: {'OK' if reachable else 'unreachable'}", reachable)
        return reachable

    except Exception as e:
        print_status(f"LLM check failed: {str(e)}", False)
        return False


async def check_postgres() -> bool:
    """Check if PostgreSQL is running."""
    try:
        from sqlalchemy import text

        from app.config import settings
        from app.database import engine

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

        print_status(f"Database connection successful ({settings.DATABASE_URL.split('@')[-1]})", True)
        return True

    except Exception as e:
        print_status(f"Database connection failed: {str(e)}", False)
        print(f"  {YELLOW}Check DATABASE_URL and that PostgreSQL is running{RESET}")
        return False


async def main():
    """Run all verification checks."""
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}WordWise Backend - Setup Verification{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

    checks: List[Tuple[str, callable]] = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Environment File", check_env_file),
        ("Image + PDF Rendering", check_rendering),
        ("PostgreSQL", check_postgres),
        ("OpenAI API", check_openai),
    ]

    results = []

    for check_name, check_func in checks:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            result = await check_func()
            results.append(result)
        except Exception as e:
            print_status(f"Error during check: {str(e)}", False)
            results.append(False)

    # Summary
    print(f"\n{BLUE}{'='*60}{RESET}")
    passed = sum(results)
    total = len(results)

    if passed == total:
        print(f"{GREEN}✓ All checks passed! ({passed}/{total}){RESET}")
        print(f"\n{GREEN}You're ready to run the backend:{RESET}")
        print(f"  uvicorn app.main:app --reload")
    else:
        print(f"{RED}✗ Some checks failed ({passed}/{total} passed){RESET}")
        print(f"\n{YELLOW}Please fix the issues above before running the backend.{RESET}")
        sys.exit(1)

    print(f"{BLUE}{'='*60}{RESET}\n")


if __name__ == "__main__":
    asyncio.run(main())
