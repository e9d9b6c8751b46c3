from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.agent import Agent


class AgentNotFoundError(Exception):
    pass


def create_agent(
    db: Session,
    *,
    agent_id: str,
    name: str,
    created_by_ref: str | None = None,
    is_locked: bool = False,
) -> Agent:
    agent = Agent(
        id=agent_id,
        name=name,
        created_by_ref=created_by_ref,
        is_locked=is_locked,
    )
    db.add(agent)
    db.commit()
    db.refresh(agent)
    return agent


def get_agent(db: Session, agent_id: str) -> Agent | None:
    return db.execute(select(Agent).where(Agent.id == agent_id)).scalar_one_or_none()


def is_agent_locked(db: Session, agent_id: str) -> bool:
    locked = db.execute(select(Agent.is_locked).where(Agent.id == agent_id)).scalar_one_or_none()
    if locked is None:
        raise AgentNotFoundError(f"Agent not found: {agent_id}")
    return bool(locked)


def set_agent_locked(db: Session, *, agent_id: str, locked: bool) -> Agent:
    agent = get_agent(db, agent_id)
    if not agent:
        raise AgentNotFoundError(f"Agent not found: {agent_id}")

    agent.is_locked = locked

    db.add(agent)
    db.commit()
    db.refresh(agent)
    return agent
