"""
Bay Navigator CLI - Safety Commands

Commands:
    status        - Show every safety setting and the network status
    quick-exit    - Configure or run the quick exit
    destinations  - List quick exit destinations
    incognito     - Turn persisted incognito mode on or off
    history       - Show, record or clear history
    tips          - Show safety tips for a program category
    check-program - Check whether a program needs safety guidance
    network       - Show network privacy status
    disguise      - list / apply / reset the disguised app icon
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, List, Optional, TypeVar

import typer

from bay_navigator.cli import console, disguise_app, safety_app
from bay_navigator.safety import (
    DEFAULT_DESTINATIONS,
    DISGUISED_ICONS,
    NetworkPrivacyStatus,
    SafetyProvider,
    find_destination,
    find_icon,
    prepare_contact,
)

T = TypeVar("T")

_LEVEL_STYLES = {
    "good": "green",
    "moderate": "blue",
    "caution": "yellow",
    "offline": "dim",
    "unknown": "dim",
}


def _run(ctx: typer.Context, action: Callable[[SafetyProvider], Awaitable[T]]) -> T:
    """Build and initialize a provider, run *action*, then dispose it."""
    from bay_navigator.app import build_provider

    obj = ctx.obj or {}

    async def runner() -> T:
        provider = build_provider(obj.get("settings"), network=obj.get("network"))
        await provider.initialize()
        try:
            return await action(provider)
        finally:
            await provider.dispose()

    return asyncio.run(runner())


def _print_network(status: NetworkPrivacyStatus | None) -> None:
    from bay_navigator.cli.output import print_panel

    if status is None:
        status = NetworkPrivacyStatus.unknown()
    style = _LEVEL_STYLES.get(status.level.value, "dim")
    lines = [f"[{style}]{status.connection_type}[/{style}] (privacy: {status.level.value})"]
    if status.warning:
        lines.append(f"[yellow]{status.warning}[/yellow]")
    if status.suggestion:
        lines.append(status.suggestion)
    print_panel("\n".join(lines), title="Network", style="warning" if status.warning else "info")


@safety_app.command("status")
def status(
    ctx: typer.Context,
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, json.",
    ),
) -> None:
    """
    Show every safety setting and the current network status.
    """
    from bay_navigator.cli.output import print_json, print_status

    async def action(provider: SafetyProvider) -> dict[str, Any]:
        return {
            "state": provider.state,
            "settings": await provider.service.get_settings(),
            "recent_programs": len(await provider.get_recent_programs()),
            "searches": len(await provider.get_search_history()),
        }

    result = _run(ctx, action)
    state = result["state"]

    if format == "json":
        print_json({
            **result["settings"].to_dict(),
            "incognito_session": state.is_incognito_session,
            "network": state.network_status.to_dict() if state.network_status else None,
            "recent_programs": result["recent_programs"],
            "searches": result["searches"],
        }, highlight=False)
        return

    icon = state.current_disguised_icon
    print_status([
        ("Quick exit", state.quick_exit_enabled, state.quick_exit_url),
        ("Incognito mode", state.incognito_mode_enabled, ""),
        ("Safety tips", state.show_safety_tips, ""),
        ("Network warnings", state.network_warnings_enabled, ""),
        ("Disguised mode", state.disguised_mode_enabled, icon.name if icon else ""),
    ], title="Safety settings")
    console.print()
    console.print(
        f"History: {result['recent_programs']} recent programs, {result['searches']} searches"
    )
    if state.network_warnings_enabled:
        _print_network(state.network_status)


@safety_app.command("quick-exit")
def quick_exit(
    ctx: typer.Context,
    enable: Optional[bool] = typer.Option(
        None,
        "--enable/--disable",
        help="Turn the quick exit on or off.",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Destination URL, or a destination id (google, weather, news, recipes).",
    ),
    run: bool = typer.Option(
        False,
        "--run",
        help="Execute the quick exit now. Requires quick exit to be enabled.",
    ),
) -> None:
    """
    Configure or run the quick exit (panic button).

    Running it clears session history, and persisted history when
    incognito applies, before opening the destination. It is refused
    while quick exit is disabled; combine --enable --run to do both.
    """
    from bay_navigator.cli.output import print_error, print_success, print_warning

    destination = find_destination(url) if url else None
    target_url = destination.url if destination else url

    async def action(provider: SafetyProvider) -> tuple[bool, bool | None]:
        if enable is not None:
            await provider.set_quick_exit_enabled(enable)
        if target_url is not None:
            await provider.set_quick_exit_url(target_url)
        if not run or not provider.quick_exit_enabled:
            return provider.quick_exit_enabled, None
        await provider.execute_quick_exit()
        return True, await provider.service.wait_for_navigation()

    enabled, opened = _run(ctx, action)

    if enable is not None:
        print_success(f"Quick exit {'enabled' if enable else 'disabled'}")
    if target_url is not None:
        print_success(f"Quick exit destination set to {target_url}")
    if run and not enabled:
        print_error("Quick exit is disabled", hint="Pass --enable to turn it on.")
        raise typer.Exit(1)
    if run:
        if opened:
            print_success("Session cleared and destination opened")
        else:
            print_warning("Session cleared, but the destination could not be opened")


@safety_app.command("destinations")
def destinations() -> None:
    """
    List the built-in quick exit destinations.
    """
    from bay_navigator.cli.output import print_table

    print_table(
        "Quick exit destinations",
        ["ID", "Name", "URL"],
        [[d.id, d.name, d.url] for d in DEFAULT_DESTINATIONS],
        styles=["cyan", None, "dim"],
    )


@safety_app.command("incognito")
def incognito(
    ctx: typer.Context,
    state: str = typer.Argument(..., help="on or off"),
) -> None:
    """
    Turn persisted incognito mode on or off.

    Turning it on erases all saved history immediately.
    """
    from bay_navigator.cli.output import print_success

    if state not in ("on", "off"):
        raise typer.BadParameter("must be 'on' or 'off'", param_hint="STATE")
    enabled = state == "on"

    async def action(provider: SafetyProvider) -> None:
        await provider.set_incognito_mode_enabled(enabled)

    _run(ctx, action)
    if enabled:
        print_success("Incognito mode on", details="Saved history was erased.")
    else:
        print_success("Incognito mode off")


@safety_app.command("history")
def history(
    ctx: typer.Context,
    add_program: Optional[str] = typer.Option(
        None,
        "--add-program",
        help="Record a viewed program id.",
    ),
    add_search: Optional[str] = typer.Option(
        None,
        "--add-search",
        help="Record a search query.",
    ),
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Erase all history.",
    ),
) -> None:
    """
    Show, record or clear history.

    Nothing is saved while incognito mode is on.
    """
    from bay_navigator.cli.output import print_success, print_table

    async def action(provider: SafetyProvider) -> tuple[list[str], list[str], bool]:
        if clear:
            await provider.clear_all_history()
        if add_program:
            await provider.add_recent_program(add_program)
        if add_search:
            await provider.add_search_query(add_search)
        return (
            await provider.get_recent_programs(),
            await provider.get_search_history(),
            provider.is_incognito_session,
        )

    programs, searches, incognito_session = _run(ctx, action)

    if clear:
        print_success("History cleared")
    if incognito_session:
        console.print("[dim]Incognito mode - history not saved[/dim]")
        return

    rows = [
        [str(i + 1), programs[i] if i < len(programs) else "", searches[i] if i < len(searches) else ""]
        for i in range(max(len(programs), len(searches)))
    ]
    print_table("History", ["#", "Recent programs", "Searches"], rows, styles=["dim", "cyan", None])


@safety_app.command("tips")
def tips(
    ctx: typer.Context,
    category: Optional[str] = typer.Argument(None, help="Program category, e.g. crisis."),
) -> None:
    """
    Show the safety tips for a program category.
    """
    from bay_navigator.cli.output import print_table

    async def action(provider: SafetyProvider):
        return provider.get_safety_tips(category)

    result = _run(ctx, action)
    print_table(
        "Safety tips",
        ["Tip", "Details"],
        [[tip.title, tip.description] for tip in result],
        styles=["bold", None],
    )


@safety_app.command("check-program")
def check_program(
    ctx: typer.Context,
    name: str = typer.Option("this program", "--name", help="Program name."),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Program category."),
    eligibility: Optional[List[str]] = typer.Option(
        None,
        "--eligibility",
        "-e",
        help="Eligibility tag (repeatable).",
    ),
) -> None:
    """
    Check whether a program needs safety guidance before contact.
    """
    from bay_navigator.cli.output import print_info

    async def action(provider: SafetyProvider):
        return provider.is_program_sensitive(category, eligibility), prepare_contact(
            provider, name, category, eligibility
        )

    sensitive, prompt = _run(ctx, action)

    if not sensitive:
        print_info(f"{name} is not marked sensitive")
        return
    console.print(f"[bold]{name}[/bold] is sensitive")
    if prompt is None:
        console.print("[dim]Safety tips are turned off[/dim]")
        return
    console.print(f"[bold]{prompt.title}[/bold]")
    console.print(prompt.intro)
    for tip in prompt.tips:
        console.print(f"  - [bold]{tip.title}[/bold]: {tip.description}")


@safety_app.command("network")
def network(ctx: typer.Context) -> None:
    """
    Show the privacy of the current network connection.
    """
    async def action(provider: SafetyProvider) -> NetworkPrivacyStatus | None:
        return provider.network_status

    _print_network(_run(ctx, action))


@disguise_app.command("list")
def disguise_list() -> None:
    """
    List the available disguised icons.
    """
    from bay_navigator.cli.output import print_table

    print_table(
        "Disguised icons",
        ["ID", "Name", "Android alias", "iOS icon"],
        [[i.id, i.name, i.android_activity_alias, i.ios_icon_name] for i in DISGUISED_ICONS],
        styles=["cyan", None, "dim", "dim"],
    )


@disguise_app.command("apply")
def disguise_apply(
    ctx: typer.Context,
    icon_id: str = typer.Argument(..., help="Icon id, see 'disguise list'."),
) -> None:
    """
    Disguise the app as a utility app.
    """
    from bay_navigator.cli.output import print_error, print_success, print_warning

    icon = find_icon(icon_id)
    if icon is None:
        print_error(
            f"Unknown icon {icon_id!r}",
            hint="Run 'bay-navigator safety disguise list' for choices.",
        )
        raise typer.Exit(1)

    async def action(provider: SafetyProvider):
        return await provider.apply_disguised_icon(icon)

    result = _run(ctx, action)
    if not result.success:
        print_error(result.message)
        raise typer.Exit(1)
    print_success(result.message)
    if result.requires_restart:
        print_warning("Restart the app to see the new icon")


@disguise_app.command("reset")
def disguise_reset(ctx: typer.Context) -> None:
    """
    Restore the default app icon.
    """
    from bay_navigator.cli.output import print_error, print_success

    async def action(provider: SafetyProvider):
        return await provider.reset_to_default_icon()

    result = _run(ctx, action)
    if not result.success:
        print_error(result.message)
        raise typer.Exit(1)
    print_success(result.message)
