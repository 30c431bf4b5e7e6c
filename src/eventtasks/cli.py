"""eventtasks CLI - event type and event administration."""

import json
import logging
import sys
from datetime import date, datetime

import click
import requests

from . import workflows
from .adapters.basecamp_api import AuthenticationError, BasecampAdapter, authorize
from .config import load_config
from .core.checklist import format_checklist_line
from .core.errors import EventTasksError


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _store(ctx: click.Context):
    return ctx.obj["store"]


def _parse_time(value: str | None) -> datetime | None:
    """Accept 'YYYY-MM-DD' or 'YYYY-MM-DDTHH:MM'."""
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Not an ISO date/time: {value}")


def _event_type_dict(et) -> dict:
    return {
        "id": et.id,
        "display_name": et.display_name,
        "description": et.description,
        "subtypes": et.subtype_ids(),
        "task_definitions": et.task_definition_ids(),
        "state": et.state.value,
    }


def _event_dict(event) -> dict:
    return {
        "id": event.id,
        "name": event.name,
        "location": event.location,
        "start_time": event.start_time.isoformat() if event.start_time else None,
        "end_time": event.end_time.isoformat() if event.end_time else None,
        "event_types": event.event_type_ids(),
        "state": event.state.value,
    }


def _show_event_types(event_types: list, as_json: bool, empty_msg: str) -> None:
    if as_json:
        click.echo(json.dumps([_event_type_dict(et) for et in event_types], indent=2))
        return
    if not event_types:
        click.echo(empty_msg)
        return
    for et in event_types:
        click.echo(f"{et.id:>4}  {et.display_name or '(unnamed)'}")


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """eventtasks - event task template manager."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.ensure_object(dict)
    if "store" not in ctx.obj:
        config = load_config()
        ctx.obj["config"] = config
        ctx.obj["store"] = workflows.get_store(config)


@main.command()
def auth():
    """Authenticate with Basecamp."""
    try:
        authorize()
    except (AuthenticationError, requests.RequestException) as e:
        _fail(e)


# ============== Event types ==============


@main.group("event-type")
def event_type():
    """Manage event types."""
    pass


@event_type.command("create")
@click.option("--name", "display_name", default="", help="Display name")
@click.option("--description", default="", help="Client-visible description")
@click.pass_context
def event_type_create(ctx, display_name: str, description: str):
    """Create a draft event type."""
    et = workflows.create_event_type(_store(ctx), display_name, description)
    click.echo(f"Created event type {et.id}")


@event_type.command("show")
@click.argument("event_type_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_type_show(ctx, event_type_id: int, as_json: bool):
    """Show one event type with its subtypes and task definitions."""
    try:
        et = _store(ctx).event_types.get(event_type_id)
        subtypes = et.subtypes()
        task_definitions = et.task_definitions()
    except EventTasksError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(_event_type_dict(et), indent=2))
        return

    click.echo(f"Event type {et.id}: {et.display_name or '(unnamed)'} [{et.state.value}]")
    if et.description:
        click.echo(f"  {et.description}")
    click.echo("Subtypes:")
    for sub in subtypes:
        click.echo(f"  {sub.id:>4}  {sub.display_name}")
    if not subtypes:
        click.echo("  (none)")
    click.echo("Task definitions:")
    for td in task_definitions:
        click.echo(
            f"  {td.id:>4}  {td.title} "
            f"(start -{td.start_offset_in_days}d, due -{td.finish_offset_in_days}d)"
        )
    if not task_definitions:
        click.echo("  (none)")


@event_type.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include drafts")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_type_list(ctx, show_all: bool, as_json: bool):
    """List published event types."""
    repo = _store(ctx).event_types
    event_types = repo.get_all() if show_all else repo.get_all_active()
    _show_event_types(event_types, as_json, "No event types.")


@event_type.command("edit")
@click.argument("event_type_id", type=int)
@click.option("--name", "display_name", default=None, help="Display name")
@click.option("--description", default=None, help="Client-visible description")
@click.pass_context
def event_type_edit(ctx, event_type_id: int, display_name: str | None, description: str | None):
    """Rename or re-describe an event type."""
    try:
        workflows.edit_event_type(_store(ctx), event_type_id, display_name, description)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Updated event type {event_type_id}")


@event_type.command("add-subtype")
@click.argument("event_type_id", type=int)
@click.argument("subtype_id", type=int)
@click.pass_context
def event_type_add_subtype(ctx, event_type_id: int, subtype_id: int):
    """Make SUBTYPE_ID a subtype of EVENT_TYPE_ID."""
    try:
        workflows.add_subtype(_store(ctx), event_type_id, subtype_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Added subtype {subtype_id} to event type {event_type_id}")


@event_type.command("remove-subtype")
@click.argument("event_type_id", type=int)
@click.argument("subtype_id", type=int)
@click.pass_context
def event_type_remove_subtype(ctx, event_type_id: int, subtype_id: int):
    """Detach a subtype."""
    try:
        workflows.remove_subtype(_store(ctx), event_type_id, subtype_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Removed subtype {subtype_id} from event type {event_type_id}")


@event_type.command("set-subtypes")
@click.argument("event_type_id", type=int)
@click.argument("ids", default="")
@click.pass_context
def event_type_set_subtypes(ctx, event_type_id: int, ids: str):
    """Replace all subtypes with a comma separated id list, e.g. 1,2,4."""
    try:
        et = workflows.set_subtypes(_store(ctx), event_type_id, ids)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Event type {event_type_id} subtypes: {et.subtype_ids_csv() or '(none)'}")


@event_type.command("addable")
@click.argument("event_type_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_type_addable(ctx, event_type_id: int, as_json: bool):
    """List event types that can be added as subtypes."""
    try:
        addable = workflows.addable_subtypes(_store(ctx), event_type_id)
    except EventTasksError as e:
        _fail(e)
    _show_event_types(addable, as_json, "Nothing can be added.")


@event_type.command("finish")
@click.argument("event_type_id", type=int)
@click.pass_context
def event_type_finish(ctx, event_type_id: int):
    """Publish an event type."""
    try:
        workflows.finish_event_type(_store(ctx), event_type_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Published event type {event_type_id}")


@event_type.command("delete")
@click.argument("event_type_id", type=int)
@click.pass_context
def event_type_delete(ctx, event_type_id: int):
    """Soft-delete an event type."""
    try:
        workflows.delete_event_type(_store(ctx), event_type_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Deleted event type {event_type_id}")


@event_type.command("tasks")
@click.argument("event_type_id", type=int)
@click.pass_context
def event_type_tasks(ctx, event_type_id: int):
    """List every task definition, subtypes included."""
    try:
        task_definitions = _store(ctx).event_types.get(event_type_id).all_task_definitions()
    except EventTasksError as e:
        _fail(e)
    if not task_definitions:
        click.echo("No task definitions.")
        return
    for td in task_definitions:
        click.echo(f"{td.id:>4}  {td.title}")


# ============== Task definitions ==============


@main.group("task-def")
def task_def():
    """Manage task definitions."""
    pass


@task_def.command("add")
@click.argument("event_type_id", type=int)
@click.argument("title")
@click.option("--start", "start_offset", type=int, default=0, help="Start, days before the event")
@click.option("--finish", "finish_offset", type=int, default=0, help="Due, days before the event")
@click.option("--description", default="", help="Task description")
@click.pass_context
def task_def_add(ctx, event_type_id: int, title: str, start_offset: int, finish_offset: int, description: str):
    """Create a task definition on an event type."""
    try:
        td = workflows.add_task_definition(
            _store(ctx), event_type_id, title, start_offset, finish_offset, description
        )
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Created task definition {td.id} on event type {event_type_id}")


@task_def.command("edit")
@click.argument("task_definition_id", type=int)
@click.option("--title", default=None)
@click.option("--start", "start_offset", type=int, default=None)
@click.option("--finish", "finish_offset", type=int, default=None)
@click.option("--description", default=None)
@click.pass_context
def task_def_edit(ctx, task_definition_id: int, title, start_offset, finish_offset, description):
    """Change a task definition."""
    try:
        workflows.edit_task_definition(
            _store(ctx), task_definition_id, title, start_offset, finish_offset, description
        )
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Updated task definition {task_definition_id}")


@task_def.command("remove")
@click.argument("event_type_id", type=int)
@click.argument("task_definition_id", type=int)
@click.pass_context
def task_def_remove(ctx, event_type_id: int, task_definition_id: int):
    """Detach a task definition from an event type."""
    try:
        workflows.remove_task_definition(_store(ctx), event_type_id, task_definition_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Removed task definition {task_definition_id} from event type {event_type_id}")


@task_def.command("delete")
@click.argument("task_definition_id", type=int)
@click.pass_context
def task_def_delete(ctx, task_definition_id: int):
    """Delete a task definition everywhere."""
    try:
        affected = workflows.delete_task_definition(_store(ctx), task_definition_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Deleted task definition {task_definition_id} ({len(affected)} event types updated)")


# ============== Events ==============


@main.group()
def event():
    """Manage events."""
    pass


@event.command("create")
@click.option("--name", default="", help="Event name")
@click.option("--location", default="", help="Event location")
@click.option("--start", "start", default=None, help="Start (YYYY-MM-DD[THH:MM])")
@click.option("--end", "end", default=None, help="End (YYYY-MM-DD[THH:MM])")
@click.pass_context
def event_create(ctx, name: str, location: str, start: str | None, end: str | None):
    """Create a draft event."""
    try:
        ev = workflows.create_event(
            _store(ctx), name, location, _parse_time(start), _parse_time(end)
        )
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Created event {ev.id}")


@event.command("show")
@click.argument("event_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_show(ctx, event_id: int, as_json: bool):
    """Show one event."""
    try:
        ev = _store(ctx).events.get(event_id)
        event_types = ev.event_types()
    except EventTasksError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(_event_dict(ev), indent=2))
        return

    click.echo(f"Event {ev.id}: {ev.name or '(unnamed)'} [{ev.state.value}]")
    if ev.location:
        click.echo(f"  @ {ev.location}")
    if ev.start_time:
        click.echo(f"  {ev.start_time.isoformat()} - {ev.end_time.isoformat() if ev.end_time else '?'}")
    click.echo("Event types:")
    for et in event_types:
        click.echo(f"  {et.id:>4}  {et.display_name}")
    if not event_types:
        click.echo("  (none)")


@event.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_list(ctx, as_json: bool):
    """List published events."""
    events = _store(ctx).events.get_all_active()
    if as_json:
        click.echo(json.dumps([_event_dict(e) for e in events], indent=2))
        return
    if not events:
        click.echo("No events.")
        return
    for ev in events:
        when = ev.start_time.date().isoformat() if ev.start_time else "undated"
        click.echo(f"{ev.id:>4}  {when}  {ev.name}")


@event.command("edit")
@click.argument("event_id", type=int)
@click.option("--name", default=None)
@click.option("--location", default=None)
@click.option("--start", "start", default=None, help="Start (YYYY-MM-DD[THH:MM])")
@click.option("--end", "end", default=None, help="End (YYYY-MM-DD[THH:MM])")
@click.pass_context
def event_edit(ctx, event_id: int, name, location, start, end):
    """Change an event's details."""
    try:
        workflows.edit_event(
            _store(ctx), event_id, name, location, _parse_time(start), _parse_time(end)
        )
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Updated event {event_id}")


@event.command("add-type")
@click.argument("event_id", type=int)
@click.argument("event_type_id", type=int)
@click.pass_context
def event_add_type(ctx, event_id: int, event_type_id: int):
    """Attach an event type to an event."""
    try:
        workflows.add_event_type_to_event(_store(ctx), event_id, event_type_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Added event type {event_type_id} to event {event_id}")


@event.command("remove-type")
@click.argument("event_id", type=int)
@click.argument("event_type_id", type=int)
@click.pass_context
def event_remove_type(ctx, event_id: int, event_type_id: int):
    """Detach an event type from an event."""
    try:
        workflows.remove_event_type_from_event(_store(ctx), event_id, event_type_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Removed event type {event_type_id} from event {event_id}")


@event.command("addable")
@click.argument("event_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_addable(ctx, event_id: int, as_json: bool):
    """List event types that would not duplicate existing tasks."""
    try:
        addable = workflows.addable_event_types_for_event(_store(ctx), event_id)
    except EventTasksError as e:
        _fail(e)
    _show_event_types(addable, as_json, "Nothing can be added.")


@event.command("checklist")
@click.argument("event_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def event_checklist(ctx, event_id: int, as_json: bool):
    """Show the dated task checklist for an event."""
    try:
        items = workflows.event_checklist(_store(ctx), event_id)
    except EventTasksError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "task_definition_id": i.task_definition_id,
                        "title": i.title,
                        "description": i.description,
                        "starts_on": i.starts_on.isoformat(),
                        "due_on": i.due_on.isoformat(),
                    }
                    for i in items
                ],
                indent=2,
            )
        )
        return

    if not items:
        click.echo("No tasks for this event.")
        return
    today = date.today()
    for item in items:
        click.echo(format_checklist_line(item, as_of=today))


@event.command("finish")
@click.argument("event_id", type=int)
@click.pass_context
def event_finish(ctx, event_id: int):
    """Publish an event."""
    try:
        workflows.finish_event(_store(ctx), event_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Published event {event_id}")


@event.command("delete")
@click.argument("event_id", type=int)
@click.pass_context
def event_delete(ctx, event_id: int):
    """Soft-delete an event."""
    try:
        workflows.delete_event(_store(ctx), event_id)
    except EventTasksError as e:
        _fail(e)
    click.echo(f"Deleted event {event_id}")


@event.command("push")
@click.argument("event_id", type=int)
@click.pass_context
def event_push(ctx, event_id: int):
    """Push an event's checklist to Basecamp."""
    try:
        tracker = BasecampAdapter(ctx.obj.get("config"))
        created = workflows.push_event_checklist(_store(ctx), event_id, tracker)
    except (EventTasksError, AuthenticationError, requests.RequestException) as e:
        _fail(e)
    click.echo(f"Pushed {len(created)} tasks to Basecamp")


if __name__ == "__main__":
    main()
