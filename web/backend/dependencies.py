#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.

The Database is created by the application lifespan and kept on
app.state; nothing here holds module-level connection state.
"""

from typing import Generator
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from core.config_loader import AppConfig
from core.ledger import TimeBankingService
from core.matcher import MatchingService
from database.database import Database
from database.repositories import ProfileRepository, ReviewRepository


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session.

    Yields:
        Session: Database session that will be automatically closed.
    """
    yield from database.session()


def get_matching_service(
    db: Session = Depends(get_db),
    config: AppConfig = Depends(get_app_config)
) -> MatchingService:
    return MatchingService(
        profiles=ProfileRepository(db),
        reviews=ReviewRepository(db),
        config=config.matching
    )


def get_time_banking_service(request: Request) -> TimeBankingService:
    return request.app.state.time_banking_service
