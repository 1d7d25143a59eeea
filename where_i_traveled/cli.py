"""Command-line interface for the travel journal."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator, Optional

import click

from .container import Container
from .dates import parse_visit_date
from .domain.errors import WhereITraveledError
from .domain.models import (
    AuthorizationStatus,
    GeoLocation,
    LocationStatus,
    Place,
    PlaceDraft,
    PlaceSort,
    SearchState,
)
from .observability import configure_logging
from .services import (
    LocationAcquisitionController,
    PlaceJournalService,
    SearchQueryController,
)

logger = logging.getLogger(__name__)

_SORTS = {
    "newest": PlaceSort.VISITED_NEWEST,
    "oldest": PlaceSort.VISITED_OLDEST,
    "name": PlaceSort.NAME,
}


def _ask_consent() -> AuthorizationStatus:
    allowed = click.confirm(
        "Allow Where I Traveled to use your approximate location?",
        default=False,
        err=True,
    )
    # IP geolocation is city-level at best.
    return AuthorizationStatus.AUTHORIZED_LIMITED if allowed else AuthorizationStatus.DENIED


def _parse_coordinate(ctx: click.Context, param: click.Parameter, value: Optional[str]):
    if value is None:
        return None
    try:
        lat_text, lon_text = value.split(",", 1)
        return GeoLocation(float(lat_text), float(lon_text))
    except ValueError as e:
        raise click.BadParameter(f"expected LAT,LON within range ({e})")


def _parse_date(ctx: click.Context, param: click.Parameter, value: Optional[str]):
    if value is None:
        return None
    try:
        return parse_visit_date(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@contextmanager
def _reported_errors() -> Iterator[None]:
    try:
        yield
    except WhereITraveledError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(e.message)


async def _search(controller: SearchQueryController, text: str) -> SearchState:
    controller.set_query(text)
    return await controller.wait_until_settled()


async def _acquire_fix(
    controller: LocationAcquisitionController, timeout: float
) -> LocationStatus:
    """Ask for permission if needed, then wait for one fix or a failure."""
    decided = asyncio.Event()

    def on_change(status: LocationStatus) -> None:
        if status.authorization_status is not AuthorizationStatus.UNDETERMINED:
            decided.set()

    unsubscribe = controller.subscribe(on_change)
    try:
        if controller.authorization_status is AuthorizationStatus.UNDETERMINED:
            controller.request_permission()
            await decided.wait()
        # No-op when the grant already auto-started the acquisition.
        controller.start()
        try:
            return await controller.wait_until_idle(timeout)
        except asyncio.TimeoutError:
            controller.stop()
            return dataclasses.replace(
                controller.status,
                last_error="Timed out waiting for a location fix",
            )
    finally:
        unsubscribe()


def _location_problem(status: LocationStatus) -> str:
    if status.authorization_status in (
        AuthorizationStatus.DENIED,
        AuthorizationStatus.RESTRICTED,
    ):
        return "Location access is disabled. Enable it to use your current location."
    return status.last_error or "No location captured."


def _format_place(place: Place) -> str:
    photo = "  [photo]" if place.has_photo else ""
    return (
        f"{place.id}  {place.visited_on.isoformat()}  "
        f"{place.name}, {place.country}  ({place.location.format()}){photo}"
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Where I Traveled - keep a journal of the places you visited."""
    if ctx.obj is None:
        with _reported_errors():
            ctx.obj = Container.create_default(consent=_ask_consent)
    configure_logging(
        ctx.obj.config.observability, level="DEBUG" if verbose else "WARNING"
    )


@cli.command()
@click.argument("text")
@click.pass_obj
def search(container: Container, text: str) -> None:
    """Search for a place by name, e.g. 'Rome, Italy'."""
    controller: SearchQueryController = container.resolve(SearchQueryController)
    state = asyncio.run(_search(controller, text))

    for index, candidate in enumerate(state.candidates, start=1):
        click.echo(f"{index}. {candidate.name}  ({candidate.location.format()})")

    if state.error_message:
        if state.error_message == controller.config.empty_results_message:
            click.echo(state.error_message)
        elif not state.candidates:
            raise click.ClickException(state.error_message)
    elif not state.candidates:
        click.echo(
            f"Type at least {controller.config.min_query_length} characters to search."
        )


@cli.command()
@click.option("--timeout", default=15.0, show_default=True, help="Seconds to wait for a fix")
@click.pass_obj
def locate(container: Container, timeout: float) -> None:
    """Print the current location."""
    controller: LocationAcquisitionController = container.resolve(
        LocationAcquisitionController
    )
    status = asyncio.run(_acquire_fix(controller, timeout))
    if status.last_fix is None:
        raise click.ClickException(_location_problem(status))
    click.echo(f"Captured: {status.last_fix.location.format()}")


@cli.command()
@click.option("--name", default="", help="Place name (defaults to the search pick)")
@click.option("--country", required=True, help="Country or region, e.g. Japan")
@click.option("--at", "coordinate", callback=_parse_coordinate, help="Coordinate as LAT,LON")
@click.option("--search", "search_text", help="Pick the coordinate from a place search")
@click.option("--pick", default=1, show_default=True, type=click.IntRange(min=1), help="Search result to use")
@click.option("--here", is_flag=True, help="Use the current location")
@click.option("--visited", callback=_parse_date, help="Visit date, e.g. 2024-03-12 or 'last friday'")
@click.option("--notes", default="", help="Free-text notes")
@click.option("--photo", type=click.Path(dir_okay=False), help="Photo file to attach")
@click.option("--timeout", default=15.0, show_default=True, help="Seconds to wait for a fix")
@click.pass_obj
def add(
    container: Container,
    name: str,
    country: str,
    coordinate: Optional[GeoLocation],
    search_text: Optional[str],
    pick: int,
    here: bool,
    visited: Optional[date],
    notes: str,
    photo: Optional[str],
    timeout: float,
) -> None:
    """Record a visited place."""
    sources = [coordinate is not None, search_text is not None, here]
    if sum(sources) != 1:
        raise click.UsageError("Use exactly one of --at, --search or --here.")

    journal: PlaceJournalService = container.resolve(PlaceJournalService)

    async def build_draft() -> PlaceDraft:
        draft = dataclasses.replace(
            journal.new_draft(visited), name=name, country=country, notes=notes
        )
        if coordinate is not None:
            draft = dataclasses.replace(draft, location=coordinate)
        elif search_text is not None:
            controller: SearchQueryController = container.resolve(SearchQueryController)
            state = await _search(controller, search_text)
            if len(state.candidates) < pick:
                raise click.ClickException(state.error_message or "No matching place.")
            chosen = controller.select_candidate(state.candidates[pick - 1].id)
            draft = journal.draft_with_candidate(draft, chosen)
        else:
            locator: LocationAcquisitionController = container.resolve(
                LocationAcquisitionController
            )
            status = await _acquire_fix(locator, timeout)
            if status.last_fix is None:
                raise click.ClickException(_location_problem(status))
            draft = journal.draft_with_fix(draft, status.last_fix)

        if photo:
            draft = await journal.attach_photo(draft, photo)
        return draft

    with _reported_errors():
        draft = asyncio.run(build_draft())
        place = journal.add_place(draft)
    click.echo(f"Saved {place.name}, {place.country} ({place.location.format()})")
    click.echo(place.id)


@cli.command("list")
@click.option("--filter", "search_text", default="", help="Match name or country")
@click.option("--sort", type=click.Choice(sorted(_SORTS)), default="newest", show_default=True)
@click.pass_obj
def list_places(container: Container, search_text: str, sort: str) -> None:
    """List visited places."""
    journal: PlaceJournalService = container.resolve(PlaceJournalService)
    with _reported_errors():
        places = journal.list_places(search_text, _SORTS[sort])
    if not places:
        click.echo("No places yet." if not search_text.strip() else "No matching places.")
        return
    for place in places:
        click.echo(_format_place(place))


@cli.command()
@click.argument("place_id")
@click.pass_obj
def show(container: Container, place_id: str) -> None:
    """Show the details of a place."""
    journal: PlaceJournalService = container.resolve(PlaceJournalService)
    with _reported_errors():
        place = journal.get_place(place_id)
    click.echo(f"{place.name}, {place.country}")
    click.echo(f"Visited: {place.visited_on.isoformat()}")
    click.echo(f"Location: {place.location.format()}")
    if place.has_photo:
        click.echo(f"Photo: {len(place.photo or b'')} bytes")
    if place.notes:
        click.echo("")
        click.echo(place.notes)


@cli.command()
@click.argument("place_id")
@click.option("--name", help="New name")
@click.option("--country", help="New country or region")
@click.option("--notes", help="New notes")
@click.option("--visited", callback=_parse_date, help="New visit date")
@click.option("--photo", type=click.Path(dir_okay=False), help="Replace the photo")
@click.option("--remove-photo", is_flag=True, help="Remove the photo")
@click.pass_obj
def edit(
    container: Container,
    place_id: str,
    name: Optional[str],
    country: Optional[str],
    notes: Optional[str],
    visited: Optional[date],
    photo: Optional[str],
    remove_photo: bool,
) -> None:
    """Edit a stored place."""
    if photo and remove_photo:
        raise click.UsageError("Use either --photo or --remove-photo.")

    journal: PlaceJournalService = container.resolve(PlaceJournalService)
    changes: dict = {}
    with _reported_errors():
        if photo:
            draft = asyncio.run(journal.attach_photo(PlaceDraft(), photo))
            if draft.photo is None:
                raise click.ClickException(f"No photo found at {photo}")
            changes["photo"] = draft.photo
        elif remove_photo:
            changes["photo"] = None
        place = journal.update_place(
            place_id,
            name=name,
            country=country,
            notes=notes,
            visited_on=visited,
            **changes,
        )
    click.echo(f"Updated {place.name}, {place.country}")


@cli.command()
@click.argument("place_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete(container: Container, place_id: str, yes: bool) -> None:
    """Delete a stored place."""
    journal: PlaceJournalService = container.resolve(PlaceJournalService)
    with _reported_errors():
        place = journal.get_place(place_id)
        if not yes:
            click.confirm(f"Delete {place.name}, {place.country}?", abort=True)
        journal.delete_place(place_id)
    click.echo(f"Deleted {place.name}, {place.country}")


@cli.command("map")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--here", is_flag=True, help="Center the map on the current location")
@click.option("--timeout", default=15.0, show_default=True, help="Seconds to wait for a fix")
@click.pass_obj
def render_map(container: Container, output: Path, here: bool, timeout: float) -> None:
    """Write an interactive HTML map of all places."""
    journal: PlaceJournalService = container.resolve(PlaceJournalService)
    center = None
    if here:
        controller: LocationAcquisitionController = container.resolve(
            LocationAcquisitionController
        )
        status = asyncio.run(_acquire_fix(controller, timeout))
        if status.last_fix is None:
            click.echo(_location_problem(status), err=True)
        else:
            center = status.last_fix.location

    with _reported_errors():
        path = journal.render_map(output, center=center)
    click.echo(f"Map written to {path}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
