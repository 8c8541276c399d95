"""
Tests for post detail retrieval and comment moderation.
"""

import asyncio

import pytest

from bulletin.exceptions import TransportError
from bulletin.retrieval import PostDetailPage, PostDetailService, Surface

from fakes import FakeModerator, FakeReader, Responses

POST_PATH = "/api/boards/3/posts/42"
CMS_POST_PATH = "/api/cms/boards/3/posts/42"
COMMENTS = "/api/boards/3/posts/42/comments"

POST = {
    "postId": 42,
    "boardId": 3,
    "postTitle": "Opening hours",
    "postContent": "<p>Open daily</p>",
    "memberName": "admin",
    "postFilePath": "posts/2024/hours.pdf",
}


def comment(comment_id):
    return {"commentsId": comment_id, "postId": 42, "memberId": "u1", "content": f"comment {comment_id}"}


def always_yes(message):
    return True


def page_for(reader, moderator=None, surface=Surface.USER, confirm=always_yes, item_reader=None):
    service = PostDetailService(reader, moderator or FakeModerator(), surface=surface,
                                item_reader=item_reader)
    return PostDetailPage(service, 3, 42, confirm)


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, expected", [
    ([comment(1)], [1]),
    ({"data": [comment(1)]}, [1]),
    ({}, []),
    (None, []),
])
async def test_comment_list_shapes(payload, expected):
    reader = FakeReader({POST_PATH: POST, COMMENTS: payload})
    page = page_for(reader)
    await page.load()

    assert [c.comment_id for c in page.comments] == expected
    assert page.comments_error is None


@pytest.mark.asyncio
async def test_load_resolves_post_and_attachment():
    reader = FakeReader({POST_PATH: {"data": POST}, COMMENTS: []})
    page = page_for(reader)
    await page.load()

    assert page.post.post_title == "Opening hours"
    assert page.attachment.url == "http://localhost:8181/2024/hours.pdf"
    assert page.attachment.file_name == "hours.pdf"
    assert not page.loading
    assert not page.not_found


@pytest.mark.asyncio
async def test_cms_surface_reads_post_through_item_reader():
    user = FakeReader({COMMENTS: [comment(1)]})
    admin = FakeReader({CMS_POST_PATH: POST})
    page = page_for(user, surface=Surface.CMS, item_reader=admin)
    await page.load()

    assert admin.count(CMS_POST_PATH) == 1
    assert user.count(COMMENTS) == 1
    assert page.post.post_id == 42


@pytest.mark.asyncio
async def test_missing_ids_issue_no_requests():
    reader = FakeReader()
    page = PostDetailPage(PostDetailService(reader, FakeModerator()), None, 42, always_yes)
    await page.load()

    assert reader.calls == []
    assert page.post is None


@pytest.mark.asyncio
async def test_missing_ids_block_comment_reload_and_delete():
    reader = FakeReader()
    moderator = FakeModerator()
    prompts = []

    def confirm(message):
        prompts.append(message)
        return True

    page = PostDetailPage(PostDetailService(reader, moderator), None, None, confirm)

    assert not await page.remove_comment(7)
    await page.reload_comments()

    assert moderator.deleted == []
    assert reader.calls == []
    assert prompts == []


@pytest.mark.asyncio
async def test_post_failure_does_not_hide_comments():
    reader = FakeReader({POST_PATH: TransportError("boom", status_code=500),
                         COMMENTS: [comment(1)]})
    page = page_for(reader)
    await page.load()

    assert page.error == PostDetailPage.POST_ERROR
    assert [c.comment_id for c in page.comments] == [1]


@pytest.mark.asyncio
async def test_comment_failure_does_not_hide_post():
    reader = FakeReader({POST_PATH: POST, COMMENTS: TransportError("boom")})
    page = page_for(reader)
    await page.load()

    assert page.post.post_id == 42
    assert page.comments == []
    assert page.comments_error == PostDetailPage.COMMENTS_ERROR
    assert page.error is None


@pytest.mark.asyncio
async def test_unusable_post_record_is_not_found():
    reader = FakeReader({POST_PATH: {"data": None}, COMMENTS: []})
    page = page_for(reader)
    await page.load()

    assert page.post is None
    assert page.not_found


@pytest.mark.asyncio
async def test_post_and_comments_fetched_concurrently():
    reader = FakeReader({POST_PATH: POST, COMMENTS: [comment(1)]})
    post_gate = reader.gate(POST_PATH)
    page = page_for(reader)

    task = asyncio.ensure_future(page.load())
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    # Comments arrive while the post request is still held
    assert [c.comment_id for c in page.comments] == [1]
    assert page.post is None

    post_gate.set()
    await task
    assert page.post.post_id == 42


@pytest.mark.asyncio
async def test_results_after_close_are_discarded():
    reader = FakeReader({POST_PATH: POST, COMMENTS: [comment(1)]})
    post_gate = reader.gate(POST_PATH)
    comments_gate = reader.gate(COMMENTS)
    page = page_for(reader)

    task = asyncio.ensure_future(page.load())
    await asyncio.sleep(0)
    page.close()
    post_gate.set()
    comments_gate.set()
    await task

    assert page.post is None
    assert page.comments == []


@pytest.mark.asyncio
async def test_delete_refetches_comments_once():
    reader = FakeReader({
        POST_PATH: POST,
        COMMENTS: Responses([
            [comment(5), comment(6), comment(7)],
            [comment(5), comment(6)],
        ]),
    })
    moderator = FakeModerator()
    page = page_for(reader, moderator)
    await page.load()
    assert reader.count(COMMENTS) == 1

    assert await page.remove_comment(7)

    assert moderator.deleted == [COMMENTS + "/7"]
    assert reader.count(COMMENTS) == 2
    assert [c.comment_id for c in page.comments] == [5, 6]


@pytest.mark.asyncio
async def test_declined_delete_sends_nothing():
    prompts = []

    def decline(message):
        prompts.append(message)
        return False

    reader = FakeReader({POST_PATH: POST, COMMENTS: [comment(7)]})
    moderator = FakeModerator()
    page = page_for(reader, moderator, confirm=decline)
    await page.load()

    assert not await page.remove_comment(7)
    assert prompts == ["Are you sure you want to delete this comment?"]
    assert moderator.deleted == []
    assert reader.count(COMMENTS) == 1


@pytest.mark.asyncio
async def test_failed_delete_alerts_and_keeps_list():
    reader = FakeReader({POST_PATH: POST, COMMENTS: [comment(7)]})
    page = page_for(reader, FakeModerator(error=TransportError("denied", status_code=403)))
    await page.load()

    assert not await page.remove_comment(7)
    assert page.alerts == [PostDetailPage.DELETE_ERROR]
    assert [c.comment_id for c in page.comments] == [7]
    assert reader.count(COMMENTS) == 1
