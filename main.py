#!/usr/bin/env python3
"""
Bulletin - Board and Page Content Management

Command line entry point. Each sub-command drives one screen of the CMS or
the public site against the configured content API and prints what the
screen would show.
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

from bulletin.api import ApiClient, IdentityContext
from bulletin.config import config
from bulletin.converters import HtmlConverter
from bulletin.editor import ResourceUploader
from bulletin.exceptions import BulletinError
from bulletin.retrieval import (
    ContentDetailPage,
    ContentDetailService,
    HomePage,
    PostDetailPage,
    PostDetailService,
    Surface,
)


def setup_logging():
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def confirm_prompt(message: str) -> bool:
    """
    Ask the user a yes/no question on the terminal.

    Returns:
        True if user confirms, False otherwise
    """
    while True:
        response = input(f"\n{message} (yes/no): ").strip().lower()
        if response in ['yes', 'y']:
            return True
        elif response in ['no', 'n']:
            return False
        else:
            print("Please enter 'yes' or 'no'")


def print_rule(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


async def run_home():
    async with ApiClient.for_context(IdentityContext.USER) as client:
        page = HomePage(client)
        await page.load()

    if page.facilities:
        print_rule("Facilities")
        for facility in page.facilities:
            print(f"{facility.name}  {facility.image_url}  [{facility.reservation_link}]")

    if page.error:
        print(page.error)
        return 1

    for section in page.sections:
        print_rule(section.title)
        if not section.available:
            print("(board unavailable)")
            continue
        if section.error:
            print(section.error)
            continue
        if not section.posts:
            print("No posts yet.")
        for post in section.posts:
            print(f"{post.date}  {post.post_title}  [{section.post_link(post.post_id)}]")
    return 0


def print_post_page(page: PostDetailPage):
    if page.error:
        print(page.error)
        return
    if page.not_found:
        print("Post not found.")
        return

    post = page.post
    print_rule(post.post_title)
    print(f"Author: {post.author}    Date: {post.post_reg_date or '-'}    Views: {post.post_view_count or 0}")
    print()
    print(post.post_content or "")
    if page.attachment:
        print(f"\nAttachment: {page.attachment.file_name} <{page.attachment.url}>")

    print_rule(f"Comments ({len(page.comments)})")
    if page.comments_error:
        print(page.comments_error)
    for comment in page.comments:
        print(f"#{comment.comment_id} {comment.author}: {comment.content}")


async def run_post(board_id: int, post_id: int, cms: bool):
    async with ApiClient.for_context(IdentityContext.USER) as user_client, \
            ApiClient.for_context(IdentityContext.ADMIN) as admin_client:
        service = PostDetailService(
            reader=user_client,
            moderator=admin_client,
            surface=Surface.CMS if cms else Surface.USER,
            item_reader=admin_client if cms else user_client
        )
        page = PostDetailPage(service, board_id, post_id, confirm_prompt)
        await page.load()

    print_post_page(page)
    return 1 if page.error else 0


async def run_delete_comment(board_id: int, post_id: int, comment_id: int, assume_yes: bool):
    confirm = (lambda message: True) if assume_yes else confirm_prompt
    async with ApiClient.for_context(IdentityContext.USER) as user_client, \
            ApiClient.for_context(IdentityContext.ADMIN) as admin_client:
        service = PostDetailService(reader=user_client, moderator=admin_client, surface=Surface.CMS,
                                    item_reader=admin_client)
        page = PostDetailPage(service, board_id, post_id, confirm)
        deleted = await page.remove_comment(comment_id)

    for alert in page.alerts:
        print(alert)
    if not deleted:
        return 1 if page.alerts else 0

    print(f"Deleted comment {comment_id}. {len(page.comments)} comments remain.")
    for comment in page.comments:
        print(f"#{comment.comment_id} {comment.author}: {comment.content}")
    return 0


def print_content_page(page: ContentDetailPage):
    if page.error:
        print(page.error)
        return
    if page.not_found:
        print("Content not found.")
        return

    content = page.content
    print_rule(content.content_title)
    print(content.content_content or "")
    if page.attachment:
        print(f"\nAttachment: {page.attachment.file_name} <{page.attachment.url}>")


async def run_content(content_type: str, content_num: int):
    async with ApiClient.for_context(IdentityContext.USER) as client:
        page = ContentDetailPage(ContentDetailService(client), content_type=content_type,
                                 content_num=content_num)
        await page.load()
    print_content_page(page)
    return 1 if page.error else 0


async def run_cms_content(content_id: int):
    async with ApiClient.for_context(IdentityContext.ADMIN) as client:
        page = ContentDetailPage(ContentDetailService(client, client), content_id=content_id)
        await page.load()
    print_content_page(page)
    return 1 if page.error else 0


def run_convert(path: str):
    markup = Path(path).read_text(encoding='utf-8')
    sys.stdout.write(HtmlConverter().normalize(markup))
    return 0


async def run_upload(path: str):
    file_path = Path(path)
    content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    async with ApiClient.for_context(IdentityContext.ADMIN) as client:
        result = await ResourceUploader(client).upload(file_path.read_bytes(), file_path.name, content_type)
    print(result.url)
    return 0


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Bulletin - Board and Page Content Management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py home                        # Latest notices and contents
  python main.py post 3 42                   # Post 42 of board 3 as an end user
  python main.py post 3 42 --cms             # The same post from the CMS
  python main.py delete-comment 3 42 7       # Delete comment 7 after confirming
  python main.py convert body.html           # Normalize stored markup
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Bulletin 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("home", help="Show the home page board listings")

    post = subparsers.add_parser("post", help="Show a post with its comments")
    post.add_argument("board_id", type=int)
    post.add_argument("post_id", type=int)
    post.add_argument("--cms", action="store_true", help="Read the post from the CMS surface")

    delete_comment = subparsers.add_parser("delete-comment", help="Delete a comment as an administrator")
    delete_comment.add_argument("board_id", type=int)
    delete_comment.add_argument("post_id", type=int)
    delete_comment.add_argument("comment_id", type=int)
    delete_comment.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    content = subparsers.add_parser("content", help="Show an informational page as an end user")
    content.add_argument("content_type")
    content.add_argument("content_num", type=int)

    cms_content = subparsers.add_parser("cms-content", help="Show an informational page from the CMS")
    cms_content.add_argument("content_id", type=int)

    convert = subparsers.add_parser("convert", help="Normalize stored markup through the document model")
    convert.add_argument("file")

    upload = subparsers.add_parser("upload", help="Upload an editor image and print its URL")
    upload.add_argument("file")

    return parser.parse_args(argv)


def dispatch(args) -> int:
    if args.command == "home":
        return asyncio.run(run_home())
    if args.command == "post":
        return asyncio.run(run_post(args.board_id, args.post_id, args.cms))
    if args.command == "delete-comment":
        return asyncio.run(run_delete_comment(args.board_id, args.post_id, args.comment_id, args.yes))
    if args.command == "content":
        return asyncio.run(run_content(args.content_type, args.content_num))
    if args.command == "cms-content":
        return asyncio.run(run_cms_content(args.content_id))
    if args.command == "convert":
        return run_convert(args.file)
    if args.command == "upload":
        return asyncio.run(run_upload(args.file))
    raise ValueError(f"Unknown command: {args.command}")


def main():
    """Main entry point."""
    args = parse_arguments()
    setup_logging()

    try:
        sys.exit(dispatch(args))
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")
    except (BulletinError, OSError) as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
