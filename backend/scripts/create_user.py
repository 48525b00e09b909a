"""
Create a user account and print an access token for it.

Identity and login are handled upstream in production. This script is for
local development and demos:

    python scripts/create_user.py --name "Dr. Rao" --email rao@example.com --role doctor
"""
import argparse
import sys
import os

# Add the parent directory to sys.path to allow imports from src
sys.path.append(os.path.join(os.path.dirname(__file__), '../src'))

from core.constants import ALL_ROLES, APPROVAL_STATUSES, APPROVAL_APPROVED
from core.database import SessionLocal
from models import User
from services.jwt_service import jwt_service, TokenPayload


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Create a user and print an access token")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--role", choices=ALL_ROLES, default="customer")
    parser.add_argument("--approval-status", choices=APPROVAL_STATUSES, default=APPROVAL_APPROVED)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == args.email).first()
        if user:
            print(f"User {args.email} already exists (id={user.id}), issuing a new token.")
        else:
            user = User(
                name=args.name,
                email=args.email,
                role=args.role,
                approval_status=args.approval_status,
                is_active=True,
            )
            db.add(user)
            db.commit()
            print(f"Created {user.role} {user.email} (id={user.id}, {user.approval_status}).")

        token = jwt_service.create_access_token(TokenPayload(
            sub=str(user.id),
            email=user.email,
            role=user.role,
            name=user.name,
        ))
        print(token)
    except Exception as e:
        print(f"Error creating user: {e}")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
