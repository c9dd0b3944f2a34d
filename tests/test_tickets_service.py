from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId

from app.repositories.system_log_repository import SystemLogRepository
from app.schemas.sla_policy import SlaPolicyUpdate
from app.services.sla_service import SlaPolicyService
from app.services.system_log_service import SystemLogService
from app.services.tickets_service import TicketService

NOW = datetime(2024, 6, 3, 12, 0, tzinfo=timezone.utc)

POLICIES = [
    {"priority": "Critical", "resolution_time_hours": 2, "response_time_hours": 0.5},
    {"priority": "High", "resolution_time_hours": 4, "response_time_hours": 1},
    {"priority": "Low", "resolution_time_hours": 0, "response_time_hours": 8},
]


def _tickets():
    return [
        {"title": "VPN down", "status": "open", "priority": "high",
         "created_at": NOW - timedelta(hours=5), "due_at": None},
        {"title": "New laptop", "status": "in_progress", "priority": "High ",
         "created_at": NOW - timedelta(hours=1), "due_at": None},
        {"title": "Printer jam", "status": "open", "priority": "Low",
         "created_at": NOW - timedelta(days=20), "due_at": None},
        {"title": "Badge reader", "status": "In Progress", "priority": "Medium",
         "created_at": NOW - timedelta(days=2), "due_at": NOW - timedelta(hours=1)},
        {"title": "Old incident", "status": "closed", "priority": "Critical",
         "created_at": NOW - timedelta(days=9), "due_at": NOW - timedelta(days=8)},
    ]


@pytest.fixture
def services(fake_collection):
    policies = SlaPolicyService(fake_collection(POLICIES))
    tickets = TicketService(fake_collection(_tickets()), policies)
    return tickets, policies


@pytest.mark.asyncio
async def test_list_tickets_flags_breaches(services):
    tickets, _ = services

    rows = await tickets.list_tickets(now=NOW)

    flags = {r["title"]: r["sla_breached"] for r in rows}
    assert flags == {
        "VPN down": True,
        "New laptop": False,
        "Printer jam": False,
        "Badge reader": True,
        "Old incident": False,
    }
    assert all(isinstance(r["id"], str) for r in rows)
    assert isinstance(rows[0]["created_at"], str)


@pytest.mark.asyncio
async def test_list_tickets_filters(services):
    tickets, _ = services

    by_status = await tickets.list_tickets(status="open", now=NOW)
    assert sorted(r["title"] for r in by_status) == ["Printer jam", "VPN down"]

    by_priority = await tickets.list_tickets(priority="HIGH", now=NOW)
    assert sorted(r["title"] for r in by_priority) == ["New laptop", "VPN down"]

    everything = await tickets.list_tickets(status="all", priority="all", now=NOW)
    assert len(everything) == 5


@pytest.mark.asyncio
async def test_summary(services):
    tickets, _ = services

    assert await tickets.summary(now=NOW) == {
        "total": 5,
        "open": 2,
        "in_progress": 2,
        "closed": 1,
        "sla_breached": 2,
    }


@pytest.mark.asyncio
async def test_list_policies_sorted_with_string_ids(services):
    _, policies = services

    rows = await policies.list_policies()

    assert [r["priority"] for r in rows] == ["Critical", "High", "Low"]
    assert all(isinstance(r["id"], str) and "_id" not in r for r in rows)


@pytest.mark.asyncio
async def test_update_policy(services):
    tickets, policies = services
    low = next(r for r in await policies.list_policies() if r["priority"] == "Low")

    updated = await policies.update_policy(low["id"], SlaPolicyUpdate(resolution_time_hours=24))

    assert updated["resolution_time_hours"] == 24
    assert updated["response_time_hours"] == 8
    assert updated["updated_at"]

    # the Low ticket is now 20 days past a 24h window
    flags = {r["title"]: r["sla_breached"] for r in await tickets.list_tickets(now=NOW)}
    assert flags["Printer jam"] is True


@pytest.mark.asyncio
async def test_update_policy_missing_or_invalid(services):
    _, policies = services

    assert await policies.update_policy(str(ObjectId()), SlaPolicyUpdate(resolution_time_hours=1)) is None
    assert await policies.update_policy(str(ObjectId()), SlaPolicyUpdate()) is None
    with pytest.raises(ValueError, match="Invalid SLA policy ID"):
        await policies.update_policy("low", SlaPolicyUpdate(resolution_time_hours=1))


# ---------------------------------------------------------------------------
# collections larger than one page
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_summary_counts_past_the_page_limit(fake_collection):
    many = [
        {"title": f"t{i}", "status": "open", "priority": "High", "created_at": NOW - timedelta(hours=5)}
        for i in range(600)
    ]
    many.append({"title": "done", "status": "Closed", "priority": "High", "created_at": NOW})
    tickets = TicketService(fake_collection(many), SlaPolicyService(fake_collection(POLICIES)))

    summary = await tickets.summary(now=NOW)

    assert summary == {
        "total": 601,
        "open": 600,
        "in_progress": 0,
        "closed": 1,
        "sla_breached": 600,
    }
    assert len(await tickets.list_tickets(now=NOW)) == 500


@pytest.mark.asyncio
async def test_status_filter_matches_normalized_values(fake_collection):
    rows = [
        {"title": f"t{i}", "status": "open", "priority": "Low", "created_at": NOW - timedelta(minutes=i)}
        for i in range(550)
    ]
    rows.append({"title": "old closed", "status": "Closed", "priority": "Low", "created_at": NOW - timedelta(days=30)})
    rows.append({"title": "spaced", "status": " In Progress ", "priority": "Low", "created_at": NOW})
    tickets = TicketService(fake_collection(rows), SlaPolicyService(fake_collection(POLICIES)))

    closed = await tickets.list_tickets(status="closed", now=NOW)
    assert [r["title"] for r in closed] == ["old closed"]

    in_progress = await tickets.list_tickets(status="in_progress", now=NOW)
    assert [r["title"] for r in in_progress] == ["spaced"]


# ---------------------------------------------------------------------------
# writes and their activity log rows
# ---------------------------------------------------------------------------


@pytest.fixture
def writable(fake_collection):
    logs_col = fake_collection()
    tickets_col = fake_collection()
    tickets = TicketService(
        tickets_col,
        SlaPolicyService(fake_collection(POLICIES)),
        SystemLogService(SystemLogRepository(logs_col)),
    )
    return tickets, tickets_col, logs_col


@pytest.mark.asyncio
async def test_create_ticket_logs_created(writable):
    tickets, tickets_col, logs_col = writable

    row = await tickets.create_ticket({"title": "VPN down", "priority": "High", "status": None}, user_id="u1")

    assert row["status"] == "open"
    assert row["created_by"] == "u1"
    assert isinstance(row["id"], str)
    assert [(r["action"], r["user_id"], r["details"]) for r in logs_col.docs] == [
        ("ticket.created", "u1", {"ticket_id": row["id"], "title": "VPN down", "priority": "High"}),
    ]


@pytest.mark.asyncio
async def test_update_ticket_logs_each_change(writable):
    tickets, tickets_col, logs_col = writable
    created = await tickets.create_ticket({"title": "Printer", "priority": "Low", "status": "open"}, user_id=None)
    logs_col.docs.clear()

    due = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)
    row = await tickets.update_ticket(
        created["id"],
        {"status": "in_progress", "due_at": due, "assigned_to": "u7", "priority": "High"},
        user_id="u1",
        source="board",
    )

    assert row["status"] == "in_progress"
    assert row["due_at"] == "2024-06-10T12:00:00+00:00"
    actions = [(r["action"], r["details"]) for r in logs_col.docs]
    assert actions == [
        ("ticket.status_changed", {"ticket_id": created["id"], "from": "open", "to": "in_progress"}),
        ("ticket.due_date_changed", {"ticket_id": created["id"], "from": None, "to": "2024-06-10T12:00:00+00:00"}),
        ("ticket.assigned", {"ticket_id": created["id"], "from": None, "to": "u7"}),
        ("ticket.updated", {"ticket_id": created["id"], "source": "board", "fields": ["priority"]}),
    ]
    assert all(r["user_id"] == "u1" for r in logs_col.docs)


@pytest.mark.asyncio
async def test_update_ticket_unassign_and_no_op(writable):
    tickets, tickets_col, logs_col = writable
    created = await tickets.create_ticket({"title": "Badge", "assigned_to": "u7"}, user_id=None)
    logs_col.docs.clear()

    await tickets.update_ticket(created["id"], {"assigned_to": None, "title": "Badge"}, user_id=None)
    assert [r["action"] for r in logs_col.docs] == ["ticket.unassigned"]

    logs_col.docs.clear()
    await tickets.update_ticket(created["id"], {}, user_id=None)
    assert logs_col.docs == []


@pytest.mark.asyncio
async def test_update_ticket_bad_or_unknown_id(writable):
    tickets, *_ = writable

    with pytest.raises(ValueError, match="Invalid ticket ID"):
        await tickets.update_ticket("nope", {"status": "closed"}, user_id=None)
    with pytest.raises(LookupError):
        await tickets.update_ticket(str(ObjectId()), {"status": "closed"}, user_id=None)


@pytest.mark.asyncio
async def test_activity_log_failure_keeps_the_ticket(fake_collection, failing_collection):
    system_logs = SystemLogService(SystemLogRepository(failing_collection()))
    tickets_col = fake_collection()
    tickets = TicketService(tickets_col, SlaPolicyService(fake_collection(POLICIES)), system_logs)

    row = await tickets.create_ticket({"title": "Kiosk"}, user_id=None)

    assert [d["title"] for d in tickets_col.docs] == ["Kiosk"]
    assert row["title"] == "Kiosk"
    assert system_logs.failed_batches == 1
