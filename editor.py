#!/usr/bin/env python3
"""Book List CLI - edit a remote book collection from the terminal."""
import argparse
import asyncio
import sys
import json
from typing import List, Optional
from tabulate import tabulate
from booklist.client import BooksApiClient
from booklist.async_client import AsyncBooksApiClient
from booklist.config import Config
from booklist.models import Book
from booklist.parse import parse_books_response, deduplicate_books
from booklist.view import BookListView, Result, filter_books, FETCH_ERROR
import logging

# Configure logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SHELL_HELP = """
Commands:
  title <text>      set the form title
  author <text>     set the form author
  save              add the book, or update the one being edited
  edit <n>          load book n into the form
  cancel            leave edit mode and clear the form
  dialog <n>        edit book n in a dialog
  delete <n>        delete book n
  search [text]     filter by title or author (no text clears)
  refresh           re-fetch the list
  help              show this help
  quit              exit
"""


def ask_yes_no(message: str) -> bool:
    """Blocking yes/no prompt."""
    answer = input(f"{message} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def make_async_client(config: Config) -> AsyncBooksApiClient:
    return AsyncBooksApiClient(config.BOOKS_API_URL, timeout=config.BOOKS_API_TIMEOUT)


def fetch_books_sync(config: Config) -> Optional[List[Book]]:
    """Fetch the collection with the retrying sync client."""
    with BooksApiClient(
        config.BOOKS_API_URL,
        timeout=config.BOOKS_API_TIMEOUT,
        max_retries=config.BOOKS_API_MAX_RETRIES
    ) as client:
        response = client.list_books()

    if response is None:
        logger.error("Failed to fetch data")
        return None

    return deduplicate_books(parse_books_response(response))


def list_books(args, config: Config) -> int:
    """List books, optionally filtered."""
    books = fetch_books_sync(config)
    if books is None:
        return 1

    if args.search:
        books = filter_books(books, args.search)

    display_books(books, args.format)
    return 0


def display_books(books: List[Book], format_type: str):
    """Display books in specified format."""
    if format_type == "table":
        headers = ["#", "Title", "Author", "ID"]
        rows = [
            [
                i,
                book.title[:50] + "..." if len(book.title) > 50 else book.title,
                book.author[:30] + "..." if len(book.author) > 30 else book.author,
                book.id
            ]
            for i, book in enumerate(books, 1)
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps([book_to_dict(book) for book in books], indent=2))

    elif format_type == "compact":
        for i, book in enumerate(books, 1):
            print(f"{i}. {book.label}")


def book_to_dict(book: Book) -> dict:
    return {"_id": book.id, "title": book.title, "author": book.author}


def export_data(args, config: Config) -> int:
    """Export the collection."""
    books = fetch_books_sync(config)
    if books is None:
        return 1

    if args.format == "json":
        data = [book_to_dict(book) for book in books]

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            logger.info(f"✅ Exported {len(books)} books to {args.output}")
        else:
            print(json.dumps(data, indent=2))

    elif args.format == "csv":
        import csv

        output_file = args.output or "books_export.csv"
        with open(output_file, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(["ID", "Title", "Author"])

            for book in books:
                writer.writerow([book.id, book.title, book.author])

        logger.info(f"✅ Exported {len(books)} books to {output_file}")

    return 0


def report(result: Result, success_message: str) -> int:
    """Print the outcome of a view handler and map it to an exit code.

    A fetch error after a mutation means the change went through and only
    the refresh that follows it failed.
    """
    if result.ok:
        print(success_message)
        return 0
    if result.error == FETCH_ERROR:
        print(success_message)
        print(f"⚠️  {result.error}")
        return 0
    if result.error:
        print(f"❌ {result.error}")
    return 1


async def add_book(args, config: Config) -> int:
    async with make_async_client(config) as client:
        async with BookListView(client, confirm=ask_yes_no) as view:
            view.update_draft("title", args.title)
            view.update_draft("author", args.author)
            return report(await view.submit(), f"✅ Added '{args.title}'")


async def update_book(args, config: Config) -> int:
    async with make_async_client(config) as client:
        async with BookListView(client, confirm=ask_yes_no) as view:
            view.begin_edit(Book(id=args.id, title=args.title, author=args.author))
            return report(await view.submit(), f"✅ Updated {args.id}")


async def delete_book(args, config: Config) -> int:
    confirm = (lambda message: True) if args.yes else ask_yes_no
    async with make_async_client(config) as client:
        async with BookListView(client, confirm=confirm) as view:
            result = await view.delete(args.id)
            if result.skipped:
                print("Cancelled")
                return 0
            return report(result, f"✅ Deleted {args.id}")


def render(view: BookListView):
    """Draw the list, the error line and the form."""
    state = view.state
    if state.error:
        print(f"\n❌ {state.error}")
    if state.query:
        print(f"\n🔍 Search: {state.query}")

    books = view.visible_books
    if books:
        display_books(books, "table")
    else:
        print("\n(no books)")

    mode = f"Editing {state.editing.id}" if state.editing else "New book"
    print(f"\n[{mode}] title={state.draft.title!r} author={state.draft.author!r}  -> {state.submit_label}")


def pick(view: BookListView, arg: str) -> Optional[Book]:
    """Resolve a 1-based row number from the visible list."""
    books = view.visible_books
    try:
        index = int(arg)
    except ValueError:
        print(f"Not a row number: {arg!r}")
        return None
    if not 1 <= index <= len(books):
        print(f"No row {index}")
        return None
    return books[index - 1]


async def edit_in_dialog(view: BookListView, book: Book):
    dialog = view.open_dialog(book)
    if dialog is None:
        return
    print(f"\nEdit Book - {book.label} (Enter keeps the current value)")
    for name in ("title", "author"):
        value = input(f"{name.capitalize()} [{getattr(dialog.draft, name)}]: ")
        if value:
            dialog.update_field(name, value)

    if not ask_yes_no("Save changes?"):
        view.dismiss_dialog()
        return

    result = await view.save_dialog()
    if not result.ok and result.error:
        print(f"❌ {result.error}")
        # Failed saves leave the dialog open; drop it so the shell stays usable
        view.dismiss_dialog()


async def run_shell(args, config: Config) -> int:
    """Interactive editor."""
    async with make_async_client(config) as client:
        async with BookListView(client, confirm=ask_yes_no) as view:
            await view.fetch_all()
            render(view)
            print(SHELL_HELP)

            while True:
                try:
                    line = input("\nbooks> ").strip()
                except EOFError:
                    break
                if not line:
                    continue

                command, _, arg = line.partition(" ")
                command = command.lower()

                if command in ("quit", "exit", "q"):
                    break
                elif command == "help":
                    print(SHELL_HELP)
                    continue
                elif command in ("title", "author"):
                    view.update_draft(command, arg)
                elif command == "save":
                    await view.submit()
                elif command == "edit":
                    book = pick(view, arg)
                    if book:
                        view.begin_edit(book)
                elif command == "cancel":
                    view.cancel_edit()
                elif command == "dialog":
                    book = pick(view, arg)
                    if book:
                        await edit_in_dialog(view, book)
                elif command == "delete":
                    book = pick(view, arg)
                    if book:
                        await view.delete(book.id)
                elif command == "search":
                    view.search(arg)
                elif command == "refresh":
                    await view.fetch_all()
                else:
                    print(f"Unknown command: {command} (try 'help')")
                    continue

                render(view)

    return 0


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Book List - edit a remote book collection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List everything
  %(prog)s list

  # Filter by title or author
  %(prog)s list --search tolkien --format compact

  # Add, update and delete
  %(prog)s add "The Hobbit" "J.R.R. Tolkien"
  %(prog)s update 64b1f0c2e4 "The Hobbit" "J. R. R. Tolkien"
  %(prog)s delete 64b1f0c2e4 --yes

  # Interactive editor
  %(prog)s shell
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    list_parser = subparsers.add_parser("list", help="List books")
    list_parser.add_argument("--search", help="Only show books whose title or author contains this text")
    list_parser.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")

    export_parser = subparsers.add_parser("export", help="Export the collection")
    export_parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format")
    export_parser.add_argument("--output", help="Output file (default: stdout for JSON)")

    add_parser = subparsers.add_parser("add", help="Add a book")
    add_parser.add_argument("title", help="Book title")
    add_parser.add_argument("author", help="Book author")

    update_parser = subparsers.add_parser("update", help="Update a book")
    update_parser.add_argument("id", help="Book ID")
    update_parser.add_argument("title", help="New title")
    update_parser.add_argument("author", help="New author")

    delete_parser = subparsers.add_parser("delete", help="Delete a book")
    delete_parser.add_argument("id", help="Book ID")
    delete_parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    subparsers.add_parser("shell", help="Interactive editor")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = Config()

    try:
        if args.command == "list":
            code = list_books(args, config)
        elif args.command == "export":
            code = export_data(args, config)
        elif args.command == "add":
            code = asyncio.run(add_book(args, config))
        elif args.command == "update":
            code = asyncio.run(update_book(args, config))
        elif args.command == "delete":
            code = asyncio.run(delete_book(args, config))
        else:
            code = asyncio.run(run_shell(args, config))

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
