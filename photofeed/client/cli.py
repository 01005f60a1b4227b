"""
Command line front end for the PhotoFeed API

    photofeed signin alice@example.com secret1
    photofeed feed --search sunset
    photofeed create ./beach.jpg --description "Evening swim"
"""
from pathlib import Path
from typing import Any, Dict, List, Optional
import argparse
import getpass
import json
import os
import sys

import httpx

from photofeed.client.api import ApiClient, ApiClientError, ApiResult

DEFAULT_BASE_URL = "http://localhost:8000"
SESSION_FILE = Path.home() / ".photofeed" / "session.json"


# ============ Session storage ============

def load_session(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or SESSION_FILE
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except ValueError:
        return {}


def save_session(session: Dict[str, Any], path: Optional[Path] = None):
    path = path or SESSION_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(session, indent=2))
    os.chmod(path, 0o600)


def clear_session(path: Optional[Path] = None):
    path = path or SESSION_FILE
    if path.exists():
        path.unlink()


# ============ Output ============

def print_post(post: Dict[str, Any], client: ApiClient):
    liked = " (liked)" if post.get("likedByMe") else ""
    print(f"[{post['id']}] {post.get('userName') or 'unknown'} - {post.get('createdAt')}")
    if post.get("description"):
        print(f"  {post['description']}")
    print(f"  image: {client.asset_url(post['image'])}")
    print(f"  likes: {post.get('likeCount', 0)}{liked}  comments: {post.get('commentCount', 0)}")


def print_comment(comment: Dict[str, Any]):
    print(f"[{comment['id']}] {comment.get('userName') or 'unknown'} - {comment.get('createdAt')}")
    print(f"  {comment['content']}")


def print_pagination(result: ApiResult):
    pagination = result.pagination or {}
    if pagination:
        print(f"-- page {pagination.get('page')} of {pagination.get('totalPages')}")


def print_error(error: ApiClientError):
    print(f"Error ({error.status_code}): {error.message}", file=sys.stderr)
    for item in error.field_errors:
        print(f"  {item.get('field') or 'request'}: {item.get('message')}", file=sys.stderr)


# ============ Commands ============

def cmd_signup(client: ApiClient, args, session: Dict[str, Any]):
    password = args.password or getpass.getpass("Password: ")
    result = client.signup(args.name, args.email, password, profile_pic=args.profile_pic)
    print(f"{result.message}: {result.data['userName']} <{result.data['email']}>")


def cmd_signin(client: ApiClient, args, session: Dict[str, Any]):
    password = args.password or getpass.getpass("Password: ")
    result = client.signin(args.email, password)
    session.update({
        "baseUrl": client.base_url,
        "token": result.data["token"],
        "userId": result.data["userId"],
        "userName": result.data["userName"],
    })
    save_session(session)
    print(f"Signed in as {result.data['userName']}")


def cmd_signout(client: ApiClient, args, session: Dict[str, Any]):
    clear_session()
    print("Signed out")


def cmd_feed(client: ApiClient, args, session: Dict[str, Any]):
    result = client.fetch_posts(page=args.page, limit=args.limit, search=args.search or "")
    if not result.data:
        print("No posts found")
    for post in result.data or []:
        print_post(post, client)
    print_pagination(result)


def cmd_post(client: ApiClient, args, session: Dict[str, Any]):
    result = client.fetch_post(args.post_id)
    print_post(result.data, client)


def cmd_create(client: ApiClient, args, session: Dict[str, Any]):
    if args.image.startswith(("http://", "https://", "/uploads/")):
        result = client.create_post(image_url=args.image, description=args.description or "")
    else:
        result = client.create_post(image=args.image, description=args.description or "")
    print(f"{result.message}: {result.data['id']}")


def cmd_edit(client: ApiClient, args, session: Dict[str, Any]):
    image = args.image
    if image and image.startswith(("http://", "https://", "/uploads/")):
        result = client.edit_post(args.post_id, description=args.description, image_url=image)
    else:
        result = client.edit_post(args.post_id, description=args.description, image=image)
    print(f"{result.message}: {result.data['id']}")


def cmd_delete(client: ApiClient, args, session: Dict[str, Any]):
    result = client.delete_post(args.post_id)
    print(result.message)


def cmd_like(client: ApiClient, args, session: Dict[str, Any]):
    result = client.toggle_like(args.post_id)
    print(f"{result.message} ({result.data['likeCount']} likes)")


def cmd_comment(client: ApiClient, args, session: Dict[str, Any]):
    result = client.create_comment(args.post_id, args.content)
    print(f"{result.message}: {result.data['id']}")


def cmd_comments(client: ApiClient, args, session: Dict[str, Any]):
    result = client.fetch_comments(args.post_id, page=args.page, limit=args.limit)
    if not result.data:
        print("No comments yet")
    for comment in result.data or []:
        print_comment(comment)
    print_pagination(result)


def cmd_uncomment(client: ApiClient, args, session: Dict[str, Any]):
    result = client.delete_comment(args.comment_id)
    print(result.message)


def cmd_profile(client: ApiClient, args, session: Dict[str, Any]):
    user_id = args.user_id or session.get("userId")
    if not user_id:
        raise SystemExit("No user id given and not signed in")

    profile = client.fetch_profile(user_id).data
    print(f"{profile['name']} <{profile['email']}> - {profile['postCount']} posts")
    for post in profile["posts"]:
        print(f"  [{post['id']}] {post.get('description') or ''}  {client.asset_url(post['image'])}")


def cmd_delete_account(client: ApiClient, args, session: Dict[str, Any]):
    if not args.yes:
        answer = input("Delete your account and all of your posts? [y/N] ")
        if answer.strip().lower() != "y":
            print("Cancelled")
            return
    result = client.delete_account()
    clear_session()
    print(result.message)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="photofeed", description="PhotoFeed command line client")
    parser.add_argument("--base-url", help=f"API base URL (default: session, $API_BASE_URL or {DEFAULT_BASE_URL})")
    commands = parser.add_subparsers(dest="command", required=True)

    signup = commands.add_parser("signup", help="Create an account")
    signup.add_argument("name")
    signup.add_argument("email")
    signup.add_argument("--password", help="Prompted for when omitted")
    signup.add_argument("--profile-pic", help="Profile picture file")
    signup.set_defaults(handler=cmd_signup)

    signin = commands.add_parser("signin", help="Sign in and remember the token")
    signin.add_argument("email")
    signin.add_argument("--password", help="Prompted for when omitted")
    signin.set_defaults(handler=cmd_signin)

    signout = commands.add_parser("signout", help="Forget the stored token")
    signout.set_defaults(handler=cmd_signout)

    feed = commands.add_parser("feed", help="List posts, newest first")
    feed.add_argument("--page", type=int, default=1)
    feed.add_argument("--limit", type=int, default=10)
    feed.add_argument("--search")
    feed.set_defaults(handler=cmd_feed)

    post = commands.add_parser("post", help="Show a single post")
    post.add_argument("post_id")
    post.set_defaults(handler=cmd_post)

    create = commands.add_parser("create", help="Create a post")
    create.add_argument("image", help="Image file, or an image path/URL")
    create.add_argument("--description")
    create.set_defaults(handler=cmd_create)

    edit = commands.add_parser("edit", help="Edit one of your posts")
    edit.add_argument("post_id")
    edit.add_argument("--image", help="New image file, or an image path/URL")
    edit.add_argument("--description")
    edit.set_defaults(handler=cmd_edit)

    delete = commands.add_parser("delete", help="Delete one of your posts")
    delete.add_argument("post_id")
    delete.set_defaults(handler=cmd_delete)

    like = commands.add_parser("like", help="Like or unlike a post")
    like.add_argument("post_id")
    like.set_defaults(handler=cmd_like)

    comment = commands.add_parser("comment", help="Comment on a post")
    comment.add_argument("post_id")
    comment.add_argument("content")
    comment.set_defaults(handler=cmd_comment)

    comments = commands.add_parser("comments", help="List comments on a post")
    comments.add_argument("post_id")
    comments.add_argument("--page", type=int, default=1)
    comments.add_argument("--limit", type=int, default=50)
    comments.set_defaults(handler=cmd_comments)

    uncomment = commands.add_parser("uncomment", help="Delete one of your comments")
    uncomment.add_argument("comment_id")
    uncomment.set_defaults(handler=cmd_uncomment)

    profile = commands.add_parser("profile", help="Show a user's profile (yours by default)")
    profile.add_argument("user_id", nargs="?")
    profile.set_defaults(handler=cmd_profile)

    delete_account = commands.add_parser("delete-account", help="Delete your account and posts")
    delete_account.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    delete_account.set_defaults(handler=cmd_delete_account)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    session = load_session()

    base_url = args.base_url or session.get("baseUrl") or os.environ.get("API_BASE_URL") or DEFAULT_BASE_URL
    with ApiClient(base_url, token=session.get("token")) as client:
        try:
            args.handler(client, args, session)
        except ApiClientError as e:
            print_error(e)
            return 1
        except httpx.HTTPError as e:
            print(f"Could not reach {base_url}: {e}", file=sys.stderr)
            return 1
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
