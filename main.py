import json
import logging
import sys
import argparse

from core.config_loader import load_config
from core.exceptions import ServiceException
from core.ledger import TimeBankingService
from core.matcher import MatchingService
from database.database import Database
from database.init_db import init_db
from database.models import SkillType
from database.repositories import ProfileRepository, ReviewRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _print_json(data):
    print(json.dumps(data, indent=2, default=str))


def run_init_db(config, database):
    init_db(database)


def run_serve(config, database):
    import uvicorn
    from web.backend.app import create_app

    app = create_app(config=config, database=database)
    logger.info(f"Starting SkillSwap API on {config.web.host}:{config.web.port}")
    uvicorn.run(app, host=config.web.host, port=config.web.port, log_level="info")


def run_matches(config, database, args):
    with database.session_scope() as session:
        service = MatchingService(
            profiles=ProfileRepository(session),
            reviews=ReviewRepository(session),
            config=config.matching
        )
        results = service.find_matches(
            args.user_id,
            skill_name=args.skill,
            skill_type=SkillType(args.type) if args.type else None,
            min_rating=args.min_rating,
            limit=args.limit
        )
        _print_json([
            {
                'user_id': r.user.id,
                'name': r.user.name,
                'match_score': r.match_score,
                'match_reasons': r.match_reasons,
                'rating': r.rating,
                'review_count': r.review_count,
            }
            for r in results
        ])


def run_recommend(config, database, args):
    with database.session_scope() as session:
        service = MatchingService(
            profiles=ProfileRepository(session),
            reviews=ReviewRepository(session),
            config=config.matching
        )
        _print_json(service.recommend_skills(args.user_id))


def run_balance(config, database, args):
    service = TimeBankingService(database, config=config.ledger)
    _print_json({'user_id': args.user_id, 'balance': service.get_user_balance(args.user_id)})


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(description="SkillSwap matching and time banking")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to the YAML config file (default: config.yaml)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')
    subparsers.add_parser('serve', help='Run the HTTP API')

    matches = subparsers.add_parser('matches', help='Rank skill-exchange partners for a user')
    matches.add_argument('user_id', type=int)
    matches.add_argument('--skill', type=str, default=None,
                         help='Only users listing a skill containing this text')
    matches.add_argument('--type', type=str, choices=[t.value for t in SkillType], default=None,
                         help='With --skill: match only offer or seek listings')
    matches.add_argument('--min-rating', type=float, default=None)
    matches.add_argument('--limit', type=positive_int, default=None)

    recommend = subparsers.add_parser('recommend', help='Suggest popular skills a user does not list')
    recommend.add_argument('user_id', type=int)

    balance = subparsers.add_parser('balance', help='Show the credit balance of a user')
    balance.add_argument('user_id', type=int)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    database = Database(config.database.url)

    try:
        if args.command == 'init-db':
            run_init_db(config, database)
        elif args.command == 'serve':
            run_serve(config, database)
        elif args.command == 'matches':
            run_matches(config, database, args)
        elif args.command == 'recommend':
            run_recommend(config, database, args)
        elif args.command == 'balance':
            run_balance(config, database, args)
    except ServiceException as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
