"""
Tests for informational page retrieval.
"""

import pytest

from bulletin.exceptions import TransportError
from bulletin.retrieval import ContentDetailPage, ContentDetailService

from fakes import FakeModerator, FakeReader

CONTENT = {
    "contentId": 9,
    "contentTitle": "Facility guide",
    "contentContent": "<p>Floor plan</p>",
    "contentType": "guide",
    "contentNum": 2,
    "contentFilePath": "/posts/guide/plan.png",
}


@pytest.mark.asyncio
async def test_user_view_unwraps_nested_record():
    reader = FakeReader({"/api/contents/guide/2": {"data": {"content": CONTENT}}})
    page = ContentDetailPage(ContentDetailService(reader), content_type="guide", content_num=2)
    await page.load()

    assert page.content.content_title == "Facility guide"
    assert page.attachment.url == "http://localhost:8181/guide/plan.png"


@pytest.mark.asyncio
async def test_cms_and_user_views_share_attachment_resolution():
    user = FakeReader({"/api/contents/guide/2": {"data": {"content": CONTENT}}})
    admin = FakeReader({"/api/cms/contents/9": {"data": CONTENT}})

    user_page = ContentDetailPage(ContentDetailService(user), content_type="guide", content_num=2)
    cms_page = ContentDetailPage(ContentDetailService(admin, FakeModerator()), content_id=9)
    await user_page.load()
    await cms_page.load()

    assert user_page.attachment == cms_page.attachment


@pytest.mark.asyncio
async def test_missing_content_is_not_found():
    reader = FakeReader({"/api/cms/contents/9": {"data": None}})
    page = ContentDetailPage(ContentDetailService(reader), content_id=9)
    await page.load()

    assert page.not_found
    assert page.error is None


@pytest.mark.asyncio
async def test_load_failure_sets_error():
    reader = FakeReader({"/api/cms/contents/9": TransportError("boom", status_code=502)})
    page = ContentDetailPage(ContentDetailService(reader), content_id=9)
    await page.load()

    assert page.error == ContentDetailPage.LOAD_ERROR
    assert not page.not_found


@pytest.mark.asyncio
async def test_delete_confirms_with_title():
    prompts = []
    moderator = FakeModerator()
    reader = FakeReader({"/api/cms/contents/9": CONTENT})
    page = ContentDetailPage(ContentDetailService(reader, moderator), content_id=9)
    await page.load()

    def confirm(message):
        prompts.append(message)
        return True

    assert await page.delete(confirm)
    assert prompts == ["Are you sure you want to delete 'Facility guide'?"]
    assert moderator.deleted == ["/api/cms/contents/9"]
    assert page.deleted


@pytest.mark.asyncio
async def test_failed_delete_alerts():
    reader = FakeReader({"/api/cms/contents/9": CONTENT})
    moderator = FakeModerator(error=TransportError("denied", status_code=403))
    page = ContentDetailPage(ContentDetailService(reader, moderator), content_id=9)
    await page.load()

    assert not await page.delete(lambda message: True)
    assert page.alerts == [ContentDetailPage.DELETE_ERROR]
