"""Reputation ledger and the comment vote state machine.

Reputation only moves with "up" votes: entering the Up state credits the comment
author, leaving it debits the same point. Down votes never touch reputation.
All counters are changed with relative in-SQL updates so concurrent voters do not
overwrite each other.
"""

import logging

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from app.core.errors import InvalidInputError, NotFoundError
from app.models import Comment, CommentVote, Topic, User
from app.schemas.discussions import VoteResult

logger = logging.getLogger(__name__)

STANCE_SUPPORT = "support"
STANCE_OPPOSE = "oppose"
STANCE_NEUTRAL = "neutral"
STANCES = frozenset({STANCE_SUPPORT, STANCE_OPPOSE, STANCE_NEUTRAL})

VOTE_UP = "up"
VOTE_DOWN = "down"
VOTE_TYPES = frozenset({VOTE_UP, VOTE_DOWN})


def next_vote_state(previous: str | None, vote: str) -> str | None:
    """Clicking the current vote again clears it; any other click switches to it."""
    return None if previous == vote else vote


class ReputationLedger:
    """Topic stance tallies and author reputation, written in the caller's transaction."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def record_comment_stance(self, topic_id: int, stance: str) -> None:
        """Count a new comment's stance on its topic: support -> credible, oppose -> controversial."""
        if stance not in STANCES:
            raise InvalidInputError("INVALID_STANCE", f"Unknown stance '{stance}'.")
        if stance == STANCE_SUPPORT:
            values = {"credible_votes": Topic.credible_votes + 1}
        elif stance == STANCE_OPPOSE:
            values = {"controversial_votes": Topic.controversial_votes + 1}
        else:
            return
        self.db.execute(
            update(Topic)
            .where(Topic.id == topic_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    def credit_author(self, author_id: int, delta: int) -> None:
        """Add delta to the author's reputation, never going below zero."""
        if delta == 0:
            return
        new_value = User.reputation + delta
        self.db.execute(
            update(User)
            .where(User.id == author_id)
            .values(reputation=case((new_value < 0, 0), else_=new_value))
            .execution_options(synchronize_session=False)
        )


class CommentVoteService:
    """Applies one vote click by a voter on a comment and commits it."""

    def __init__(self, db: Session, ledger: ReputationLedger | None = None) -> None:
        self.db = db
        self.ledger = ledger or ReputationLedger(db)

    def cast_vote(self, voter_id: int, comment_id: int, vote: str) -> VoteResult:
        """
        Transition the (voter, comment) vote state and update counters.

        NoVote->Up +1 up and +1 author reputation; NoVote->Down +1 down;
        Up->NoVote and Up->Down retract the up vote and the reputation point;
        Down->NoVote -1 down; Down->Up moves the vote and credits the author.
        Votes on one's own comment change counters but not reputation.
        """
        if vote not in VOTE_TYPES:
            raise InvalidInputError("INVALID_VOTE", "Vote must be 'up' or 'down'.")
        comment = self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("COMMENT_NOT_FOUND", "Comment not found.")

        existing = (
            self.db.query(CommentVote)
            .filter(CommentVote.user_id == voter_id, CommentVote.comment_id == comment_id)
            .with_for_update()
            .first()
        )
        previous = existing.vote_type if existing is not None else None
        state = next_vote_state(previous, vote)

        up_delta = int(state == VOTE_UP) - int(previous == VOTE_UP)
        down_delta = int(state == VOTE_DOWN) - int(previous == VOTE_DOWN)

        if existing is not None and state is None:
            self.db.delete(existing)
        elif existing is not None:
            existing.vote_type = state
        else:
            self.db.add(CommentVote(user_id=voter_id, comment_id=comment_id, vote_type=state))
        self.db.flush()

        self.db.execute(
            update(Comment)
            .where(Comment.id == comment_id)
            .values(
                upvotes=Comment.upvotes + up_delta,
                downvotes=Comment.downvotes + down_delta,
            )
            .execution_options(synchronize_session=False)
        )
        if up_delta and comment.author_id != voter_id:
            self.ledger.credit_author(comment.author_id, up_delta)
        self.db.commit()

        self.db.refresh(comment)
        logger.info(
            "Comment vote applied",
            extra={
                "comment_id": comment_id,
                "voter_id": voter_id,
                "previous": previous,
                "state": state,
            },
        )
        return VoteResult(
            comment_id=comment_id,
            upvotes=comment.upvotes,
            downvotes=comment.downvotes,
            user_vote=state,
        )
