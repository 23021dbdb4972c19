#!/usr/bin/env python3
"""
Verification script to check if Wayfinder is set up correctly.
Run this after installation to verify everything works.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from rich.console import Console
from rich.panel import Panel

console = Console()

REQUIRED_MODULES = {
    "playwright": "playwright",
    "openai": "openai",
    "anthropic": "anthropic",
    "tenacity": "tenacity",
    "pydantic": "pydantic",
    "dotenv": "python-dotenv",
    "yaml": "pyyaml",
    "loguru": "loguru",
    "rich": "rich",
}


def check_python_version():
    """Check Python version."""
    version = sys.version_info
    label = f"{version.major}.{version.minor}.{version.micro}"
    return version >= (3, 10), label


def check_dependencies():
    """Check if all required packages are importable."""
    results = {}
    for module_name, dist_name in REQUIRED_MODULES.items():
        try:
            mod = __import__(module_name)
            results[dist_name] = True, getattr(mod, "__version__", "installed")
        except ImportError:
            results[dist_name] = False, "Not installed"

    return results


def check_config():
    """Check configuration."""
    try:
        from wayfinder.utils import config

        return {
            "Config loaded": config is not None,
            "LLM API key": bool(config.openai_api_key or config.anthropic_api_key),
            "Targets configured": len(config.targets) > 0,
            "Cache dir exists": config.cache_dir.exists()
        }
    except Exception as e:
        return {f"Error: {e}": False}


def check_playwright():
    """Check if Playwright browsers are installed."""
    try:
        from playwright.sync_api import sync_playwright

        with sync_playwright() as p:
            try:
                browser = p.chromium.launch()
                browser.close()
                return True, "Chromium installed"
            except Exception as e:
                return False, str(e)
    except Exception as e:
        return False, str(e)


def main():
    console.print(Panel.fit(
        "[bold blue]Wayfinder Setup Verification[/bold blue]\n"
        "Checking if everything is installed correctly...",
        border_style="blue"
    ))
    console.print()

    console.print("[bold]1. Python Version[/bold]")
    python_ok, version = check_python_version()
    if python_ok:
        console.print(f"   ✅ Python {version} (OK)")
    else:
        console.print(f"   ❌ Python {version} (Need 3.10+)")
    console.print()

    console.print("[bold]2. Dependencies[/bold]")
    deps = check_dependencies()
    for package, (installed, version) in deps.items():
        mark = "✅" if installed else "❌"
        console.print(f"   {mark} {package}: {version}")
    console.print()

    console.print("[bold]3. Playwright Browsers[/bold]")
    playwright_ok, message = check_playwright()
    if playwright_ok:
        console.print(f"   ✅ {message}")
    else:
        console.print(f"   ❌ {message}")
        console.print("   💡 Run: playwright install chromium")
    console.print()

    console.print("[bold]4. Configuration[/bold]")
    config_checks = check_config()
    for check, status in config_checks.items():
        if status:
            console.print(f"   ✅ {check}")
        else:
            console.print(f"   ❌ {check}")
            if "API key" in check:
                console.print("      💡 Add OPENAI_API_KEY or ANTHROPIC_API_KEY to .env file")
    console.print()

    all_passed = (
        python_ok
        and all(installed for installed, _ in deps.values())
        and playwright_ok
        and all(config_checks.values())
    )

    if all_passed:
        console.print(Panel.fit(
            "[bold green]✅ All checks passed![/bold green]\n"
            "You're ready to use Wayfinder.\n\n"
            "Try: [cyan]wayfinder --list-targets[/cyan]",
            border_style="green"
        ))
    else:
        console.print(Panel.fit(
            "[bold yellow]⚠️  Some checks failed[/bold yellow]\n"
            "Please address the issues above.",
            border_style="yellow"
        ))
        sys.exit(1)


if __name__ == "__main__":
    main()
