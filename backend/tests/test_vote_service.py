"""Tests for VoteService"""
import pytest
from sqlalchemy import event, func
from sqlalchemy.dialects import postgresql

from app.models.queue_item import QueueItem
from app.models.vote import Vote, VoteType
from app.services.errors import SessionEndedError

from helpers import HOST, track


@pytest.fixture
def session(session_service):
    return session_service.create(HOST, "house")


@pytest.fixture
def item(queue_service, session):
    return queue_service.add_track(session.id, "user-a", track("T1"))


def _vote_rows(db, item_id):
    return db.query(Vote).filter(Vote.queue_item_id == item_id).all()


def _assert_counts_match_votes(db, item_id):
    item = db.query(QueueItem).filter(QueueItem.id == item_id).one()
    for vote_type, cached in ((VoteType.UPVOTE, item.upvotes), (VoteType.DOWNVOTE, item.downvotes)):
        actual = db.query(func.count(Vote.id)).filter(
            Vote.queue_item_id == item_id,
            Vote.vote_type == vote_type
        ).scalar()
        assert cached == actual


def test_vote_ranking_scenario(db, queue_service, vote_service, session):
    t1 = queue_service.add_track(session.id, "user-a", track("T1"))
    t2 = queue_service.add_track(session.id, "user-a", track("T2"))
    t3 = queue_service.add_track(session.id, "user-a", track("T3"))
    assert [t1.position, t2.position, t3.position] == [1, 2, 3]

    vote_service.vote("user-a", t3.id, VoteType.UPVOTE)
    vote_service.vote("user-b", t3.id, VoteType.UPVOTE)
    vote_service.vote("user-c", t1.id, VoteType.UPVOTE)

    queue = queue_service.get_queue(session.id)
    assert [(q.track_ref["title"], q.upvotes) for q in queue] == [("T3", 2), ("T1", 1), ("T2", 0)]
    assert [q.vote_count for q in queue] == [2, 1, 0]


def test_changing_vote_overwrites_it(db, vote_service, item):
    vote_service.vote("user-a", item.id, VoteType.UPVOTE)
    vote = vote_service.vote("user-a", item.id, VoteType.DOWNVOTE)

    db.refresh(item)
    assert (item.upvotes, item.downvotes) == (0, 1)
    rows = _vote_rows(db, item.id)
    assert len(rows) == 1
    assert rows[0].id == vote.id
    assert rows[0].vote_type == VoteType.DOWNVOTE


def test_repeating_same_vote_is_not_additive(db, vote_service, item):
    vote_service.vote("user-a", item.id, VoteType.UPVOTE)
    vote_service.vote("user-a", item.id, VoteType.UPVOTE)

    db.refresh(item)
    assert item.upvotes == 1
    assert len(_vote_rows(db, item.id)) == 1


def test_counts_track_vote_rows(db, vote_service, item):
    sequence = [
        ("user-a", VoteType.UPVOTE),
        ("user-b", VoteType.DOWNVOTE),
        ("user-c", VoteType.UPVOTE),
        ("user-a", VoteType.DOWNVOTE),
        ("user-d", VoteType.DOWNVOTE),
        ("user-b", VoteType.UPVOTE),
    ]
    for user_id, vote_type in sequence:
        vote_service.vote(user_id, item.id, vote_type)
        _assert_counts_match_votes(db, item.id)

    db.refresh(item)
    assert (item.upvotes, item.downvotes) == (2, 2)


def test_vote_accepts_plain_string_type(db, vote_service, item):
    vote = vote_service.vote("user-a", item.id, "DOWNVOTE")

    assert vote.vote_type == VoteType.DOWNVOTE


def test_invalid_vote_type(vote_service, item):
    with pytest.raises(ValueError):
        vote_service.vote("user-a", item.id, "SIDEWAYS")


def test_vote_on_missing_item(vote_service):
    assert vote_service.vote("user-a", "missing", VoteType.UPVOTE) is None


def test_vote_on_item_of_other_session(vote_service, session_service, item):
    other = session_service.create(HOST, "techno")

    assert vote_service.vote("user-a", item.id, VoteType.UPVOTE, session_id=other.id) is None
    assert vote_service.get_user_vote(item.id, "user-a") is None


def test_vote_in_ended_session(vote_service, session_service, session, item):
    session_service.end(session.id, HOST)

    with pytest.raises(SessionEndedError):
        vote_service.vote("user-a", item.id, VoteType.UPVOTE)


def test_vote_retries_when_concurrent_insert_wins(db, session_factory, vote_service, item, monkeypatch):
    upsert = vote_service._upsert_vote
    calls = []

    def racing_upsert(queue_item, user_id, vote_type):
        calls.append(user_id)
        if len(calls) == 1:
            # Another request stores this user's first vote between our lookup and insert
            other = session_factory()
            other.add(Vote(queue_item_id=queue_item.id, user_id=user_id, vote_type=VoteType.UPVOTE))
            other.commit()
            other.close()
            db.add(Vote(queue_item_id=queue_item.id, user_id=user_id, vote_type=vote_type))
            db.flush()
        return upsert(queue_item, user_id, vote_type)

    monkeypatch.setattr(vote_service, "_upsert_vote", racing_upsert)

    vote = vote_service.vote("user-a", item.id, VoteType.DOWNVOTE)

    assert len(calls) == 2
    assert vote.vote_type == VoteType.DOWNVOTE
    rows = _vote_rows(db, item.id)
    assert [(row.user_id, row.vote_type) for row in rows] == [("user-a", VoteType.DOWNVOTE)]
    db.refresh(item)
    assert (item.upvotes, item.downvotes) == (0, 1)


def test_vote_locks_queue_item_row(db, vote_service, item):
    statements = []

    def capture(orm_execute_state):
        if orm_execute_state.is_select and not (
            orm_execute_state.is_column_load or orm_execute_state.is_relationship_load
        ):
            statements.append(str(orm_execute_state.statement.compile(dialect=postgresql.dialect())))

    event.listen(db, "do_orm_execute", capture)
    try:
        vote_service.vote("user-a", item.id, VoteType.UPVOTE)
    finally:
        event.remove(db, "do_orm_execute", capture)

    item_loads = [s for s in statements if "FROM queue_items" in s and "queue_items.id =" in s]
    assert item_loads
    assert all(s.rstrip().endswith("FOR UPDATE") for s in item_loads)
