import pytest

from postroom.core.errors import Conflict, Forbidden, NotFound, ValidationError
from postroom.models import Blog, BlogCategory, Comment, Follow, Notification, SavedBlog, Star
from postroom.services import comments, library, publishing, reading, search


@pytest.fixture
def author(make_user):
    return make_user("bob@example.com", username="bob", fullname="Bob Writer")


@pytest.fixture
def reader(make_user):
    return make_user("alice@example.com", username="alice")


@pytest.fixture
def post(store, author):
    blog = publishing.create_draft(store, author, "Hello world", "First post")
    publishing.edit_draft(store, blog.id, author, categories=["python"])
    return publishing.publish(store, blog.id, author.id)


@pytest.fixture
def draft(store, author):
    return publishing.create_draft(store, author, "Work in progress", "Not yet")


class TestGetBlog:
    def test_reader_context(self, store, author, reader, post, db_session):
        db_session.add(Follow(user_id=author.id, follower_id=reader.id))
        db_session.commit()
        library.star_blog(store, reader, post.id)
        comments.create_comment(store, reader, post.id, "Nice")

        view = reading.get_blog(store, post.id, reader.id)

        assert view.author.fullname == "Bob Writer"
        assert [c.name for c in view.categories] == ["python"]
        assert view.star_count == 1
        assert view.comment_count == 1
        assert view.starred is True
        assert view.saved is False
        assert view.following is True

    def test_anonymous_reader(self, store, post):
        view = reading.get_blog(store, post.id)

        assert view.starred is False
        assert view.following is False

    def test_draft_visible_to_author_only(self, store, author, reader, draft):
        assert reading.get_blog(store, draft.id, author.id).blog.draft is True

        with pytest.raises(NotFound):
            reading.get_blog(store, draft.id, reader.id)
        with pytest.raises(NotFound):
            reading.get_blog(store, draft.id)

    def test_missing_blog(self, store):
        with pytest.raises(NotFound):
            reading.get_blog(store, 999)


class TestListings:
    def test_feed_has_published_only(self, store, reader, post, draft):
        assert [view.blog.id for view in reading.list_feed(store, reader)] == [post.id]

    def test_feed_pages(self, store, author, reader):
        for i in range(12):
            blog = publishing.create_draft(store, author, f"Post {i}", "Body")
            publishing.publish(store, blog.id, author.id)

        first = reading.list_feed(store, reader)
        second = reading.list_feed(store, reader, skip=reading.PAGE_SIZE)

        assert len(first) == 10
        assert len(second) == 2
        assert not {v.blog.id for v in first} & {v.blog.id for v in second}

    def test_drafts_are_the_authors_own(self, store, author, reader, post, draft):
        assert [view.blog.id for view in reading.list_drafts(store, author)] == [draft.id]
        assert reading.list_drafts(store, reader) == []

    def test_category_blogs(self, store, author, reader, post):
        tagged_draft = publishing.create_draft(store, author, "Hidden", "Body")
        publishing.edit_draft(store, tagged_draft.id, author, categories=["python"])

        assert [view.blog.id for view in reading.list_category_blogs(store, reader, "python")] == [post.id]
        assert reading.list_category_blogs(store, reader, "cooking") == []
        assert [c.name for c in reading.list_categories(store)] == ["python"]


class TestComments:
    def test_create_and_list(self, store, reader, author, post):
        first = comments.create_comment(store, reader, post.id, "First!")
        second = comments.create_comment(store, author, post.id, "Thanks")

        listed = comments.list_comments(store, post.id)

        assert [comment.id for comment, _ in listed] == [second.id, first.id]
        assert [user.username for _, user in listed] == ["bob", "alice"]

    def test_cannot_comment_on_draft(self, store, reader, draft):
        with pytest.raises(NotFound):
            comments.create_comment(store, reader, draft.id, "Early")

    def test_requires_content(self, store, reader, post):
        with pytest.raises(ValidationError):
            comments.create_comment(store, reader, post.id, "")

    def test_only_author_edits(self, store, reader, author, post):
        comment = comments.create_comment(store, reader, post.id, "Typo")

        with pytest.raises(Forbidden):
            comments.edit_comment(store, author, comment.id, "Rewritten")
        assert comments.edit_comment(store, reader, comment.id, "Fixed").content == "Fixed"

    def test_post_author_may_delete(self, store, reader, author, post, make_user, db_session):
        comment = comments.create_comment(store, reader, post.id, "Spam")
        stranger = make_user("eve@example.com", username="eve")

        with pytest.raises(Forbidden):
            comments.delete_comment(store, stranger, comment.id)
        comments.delete_comment(store, author, comment.id)

        assert db_session.query(Comment).count() == 0
        with pytest.raises(NotFound):
            comments.delete_comment(store, author, comment.id)


class TestStarsAndSavedList:
    def test_star_once(self, store, reader, post):
        library.star_blog(store, reader, post.id)

        with pytest.raises(Conflict):
            library.star_blog(store, reader, post.id)

        library.unstar_blog(store, reader, post.id)
        with pytest.raises(NotFound):
            library.unstar_blog(store, reader, post.id)

    def test_cannot_star_or_save_draft(self, store, reader, draft):
        with pytest.raises(NotFound):
            library.star_blog(store, reader, draft.id)
        with pytest.raises(NotFound):
            library.save_blog(store, reader, draft.id)

    def test_saved_list(self, store, author, reader, post):
        other = publishing.create_draft(store, author, "Second", "Body")
        publishing.publish(store, other.id, author.id)

        library.save_blog(store, reader, post.id)
        library.save_blog(store, reader, other.id)
        with pytest.raises(Conflict):
            library.save_blog(store, reader, post.id)

        saved = library.list_saved_blogs(store, reader)
        assert [view.blog.id for view in saved] == [other.id, post.id]
        assert all(view.saved for view in saved)

        library.unsave_blog(store, reader, other.id)
        assert [view.blog.id for view in library.list_saved_blogs(store, reader)] == [post.id]
        with pytest.raises(NotFound):
            library.unsave_blog(store, reader, other.id)


class TestSearch:
    def test_matches_title_ignoring_case(self, store, reader, post, draft):
        found = search.search_blogs(store, reader, "HELLO")

        assert [view.blog.id for view in found] == [post.id]
        assert search.search_blogs(store, reader, "progress") == []

    def test_wildcards_are_literal(self, store, reader, post):
        assert search.search_blogs(store, reader, "%") == []

    def test_empty_query(self, store, reader):
        with pytest.raises(ValidationError):
            search.search_blogs(store, reader, "  ")

    def test_recent_searches(self, store, reader, clock):
        for query in ["one", "two", "three", "four", "five", "six"]:
            search.search_blogs(store, reader, query, clock=clock)
            clock.advance(seconds=1)
        search.search_blogs(store, reader, "three", clock=clock)

        recent = [s.content for s in search.recent_searches(store, reader)]
        assert recent == ["three", "six", "five", "four", "two"]

    def test_delete_search(self, store, reader, author):
        search.search_blogs(store, reader, "python")
        entry = search.recent_searches(store, reader)[0]

        with pytest.raises(Forbidden):
            search.delete_search(store, author, entry.id)
        search.delete_search(store, reader, entry.id)

        assert search.recent_searches(store, reader) == []
        with pytest.raises(NotFound):
            search.delete_search(store, reader, entry.id)


class TestDeleteBlog:
    def test_removes_everything_pointing_at_it(self, store, author, reader, post, db_session):
        db_session.add(Follow(user_id=author.id, follower_id=reader.id))
        db_session.commit()
        second = publishing.create_draft(store, author, "Second", "Body")
        publishing.publish(store, second.id, author.id)
        comments.create_comment(store, reader, second.id, "Hi")
        library.star_blog(store, reader, second.id)
        library.save_blog(store, reader, second.id)
        publishing.edit_draft(store, second.id, author, categories=["web"])

        publishing.delete_blog(store, second.id, author.id)

        assert db_session.get(Blog, second.id) is None
        for model in (Notification, BlogCategory, Comment, Star, SavedBlog):
            assert db_session.query(model).filter_by(blog_id=second.id).count() == 0
        assert db_session.get(Blog, post.id) is not None
        assert db_session.query(BlogCategory).filter_by(blog_id=post.id).count() == 1

    def test_only_author_deletes(self, store, reader, post, db_session):
        with pytest.raises(Forbidden):
            publishing.delete_blog(store, post.id, reader.id)
        assert db_session.get(Blog, post.id) is not None

    def test_missing_blog(self, store, author):
        with pytest.raises(NotFound):
            publishing.delete_blog(store, 999, author.id)
