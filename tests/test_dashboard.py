# tests/test_dashboard.py

"""
Tests for dashboard statistics and the live aggregator's polling fallback.
"""

from unittest.mock import Mock

from core.change_feed import LocalChangeFeed
from services.dashboard import (
    DashboardAggregator,
    compute_dashboard_stats,
    get_dashboard_stats,
    recent_activities,
)
from services.user_actions import approve_user
from tests.conftest import USERS, WARDS, ZONES


def test_compute_stats():
    stats = compute_dashboard_stats(USERS, ZONES, WARDS)
    assert stats.total_users == 6
    assert stats.verified_users == 4
    assert stats.pending_users == 2
    assert stats.rejected_users == 0
    assert stats.verification_rate == 67
    assert stats.last_updated is not None


def test_compute_stats_with_no_users():
    stats = compute_dashboard_stats([], [], [])
    assert stats.verification_rate == 0


def test_stats_are_scoped(fake_supabase, zonal_admin, member_user):
    stats = get_dashboard_stats(fake_supabase, zonal_admin)
    assert stats.total_users == 2
    assert stats.total_zones == 1
    assert stats.total_wards == 1

    assert get_dashboard_stats(fake_supabase, member_user).total_users == 0


def test_recent_activities_scoped_and_limited(fake_supabase, super_admin, zonal_admin):
    approve_user(fake_supabase, super_admin, "member-1")
    approve_user(fake_supabase, super_admin, "member-3")

    assert len(recent_activities(fake_supabase, super_admin, limit=1)) == 1
    scoped = recent_activities(fake_supabase, zonal_admin)
    assert [a.target_user_id for a in scoped] == ["member-1"]


# ============================================================
# LIVE AGGREGATOR
# ============================================================
def make_aggregator(users=None, bridged=True):
    data = {"users": list(users if users is not None else USERS)}
    feed = LocalChangeFeed()
    if bridged:
        feed.attach_bridge()
    scheduler = Mock()
    aggregator = DashboardAggregator(
        loader=lambda: (data["users"], ZONES, WARDS),
        feed=feed,
        scheduler=scheduler,
        poll_interval=30,
    )
    return aggregator, feed, scheduler, data


def test_change_notification_recomputes_and_notifies():
    aggregator, feed, _, data = make_aggregator()
    snapshots = []
    aggregator.add_listener(snapshots.append)
    aggregator.start()

    data["users"] = data["users"][:1]
    feed.publish("users", "update", "member-1")

    assert snapshots[-1].stats.total_users == 1
    assert aggregator.stats.total_users == 1
    assert aggregator.last_updated is not None


def test_channel_error_starts_polling_and_restore_stops_it():
    aggregator, feed, scheduler, _ = make_aggregator()
    aggregator.start()

    feed.channel_error(RuntimeError("socket closed"))
    assert aggregator.is_connected is False
    assert aggregator.is_polling is True
    scheduler.add_job.assert_called_once()
    assert scheduler.add_job.call_args.kwargs["trigger"].interval.total_seconds() == 30

    # a second error does not schedule a second job
    feed.channel_error(RuntimeError("still down"))
    assert scheduler.add_job.call_count == 1

    feed.channel_restored()
    assert aggregator.is_connected is True
    assert aggregator.is_polling is False
    scheduler.remove_job.assert_called_once()


def test_start_while_disconnected_polls_immediately():
    aggregator, feed, scheduler, _ = make_aggregator()
    feed.connected = False

    aggregator.start()

    assert aggregator.is_polling is True
    assert aggregator.stats is not None


def test_without_bridge_polls_from_the_start():
    aggregator, feed, scheduler, data = make_aggregator(bridged=False)
    snapshots = []
    aggregator.add_listener(snapshots.append)

    aggregator.start()

    assert feed.connected is False
    assert aggregator.is_polling is True
    assert snapshots[0].is_connected is False

    # the poll job picks up writes this process never published
    poll = scheduler.add_job.call_args.args[0]
    data["users"] = []
    poll()
    assert aggregator.stats.total_users == 0


def test_restore_is_ignored_without_bridge():
    aggregator, feed, _, _ = make_aggregator(bridged=False)
    aggregator.start()

    feed.channel_restored()

    assert feed.connected is False
    assert aggregator.is_polling is True


def test_stop_unsubscribes_and_discards_late_updates():
    aggregator, feed, scheduler, data = make_aggregator()
    snapshots = []
    aggregator.add_listener(snapshots.append)
    aggregator.start()
    feed.channel_error(RuntimeError("down"))

    aggregator.stop()
    count = len(snapshots)

    assert feed.subscriber_count() == 0
    scheduler.remove_job.assert_called_once()

    data["users"] = []
    assert aggregator.refresh() is None
    assert len(snapshots) == count
    assert aggregator.stats.total_users == len(USERS)


def test_failed_refresh_keeps_previous_stats():
    aggregator, feed, _, _ = make_aggregator()
    aggregator.start()
    previous = aggregator.stats

    aggregator._loader = Mock(side_effect=Exception("timeout"))
    feed.publish("users", "insert")

    assert aggregator.stats is previous
