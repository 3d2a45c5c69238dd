"""Tests for the node registry."""

import uuid
from datetime import timedelta

import pytest
from django.db.models import RestrictedError
from django.utils import timezone

from server.apps.drive.logic import registry
from server.apps.drive.models import FileNode, NodeKind, StorageKind


def _folder(owner, name, parent=None):
    return registry.create_node(
        owner_id=owner.id,
        kind=NodeKind.FOLDER,
        display_name=name,
        original_name=name,
        parent_id=parent.id if parent else None,
    )


def _file(owner, name, parent=None):
    return registry.create_node(
        owner_id=owner.id,
        kind=NodeKind.FILE,
        display_name=name,
        original_name=name,
        parent_id=parent.id if parent else None,
        storage_path=f'{owner.id}/{uuid.uuid4().hex}_{name}',
        storage_backend=StorageKind.FILESYSTEM,
        content_type='text/plain',
        size_bytes=10,
    )


@pytest.mark.django_db
class TestFindById:
    """Tests for find_by_id."""

    def test_existing(self, user):
        """Test an existing node is returned."""
        node = _file(user, 'a.txt')

        assert registry.find_by_id(node.id) == node
        assert registry.find_by_id(str(node.id)) == node

    def test_unknown(self, user):
        """Test an unknown id gives None."""
        assert registry.find_by_id(uuid.uuid4()) is None

    def test_malformed(self, user):
        """Test a malformed id is treated as unknown."""
        assert registry.find_by_id('not-a-uuid') is None


@pytest.mark.django_db
class TestFindByOwner:
    """Tests for listing direct children."""

    def test_root_level_only(self, user):
        """Test root listing excludes nested items."""
        docs = _folder(user, 'Docs')
        root_file = _file(user, 'a.txt')
        _file(user, 'nested.txt', parent=docs)

        listed = registry.find_by_owner(user.id)

        assert set(listed) == {docs, root_file}
        assert registry.count_children(user.id, None) == 2

    def test_folder_children(self, user):
        """Test listing a folder returns its direct children."""
        docs = _folder(user, 'Docs')
        inner = _folder(user, 'Inner', parent=docs)
        nested = _file(user, 'nested.txt', parent=docs)
        _file(user, 'deep.txt', parent=inner)

        assert set(registry.find_by_owner(user.id, docs.id)) == {inner, nested}

    def test_other_owner_excluded(self, user, other_user):
        """Test listing never shows other users' nodes."""
        _file(other_user, 'theirs.txt')

        assert registry.find_by_owner(user.id) == []

    def test_pagination(self, user):
        """Test limit and offset slice the newest-first listing."""
        start = timezone.now()
        nodes = []
        for index in range(5):
            node = _file(user, f'{index}.txt')
            FileNode.objects.filter(id=node.id).update(
                created_at=start + timedelta(minutes=index),
            )
            nodes.append(node)
        newest_first = list(reversed(nodes))

        page = registry.find_by_owner(user.id, limit=2, offset=1)

        assert page == newest_first[1:3]


@pytest.mark.django_db
class TestSearch:
    """Tests for search_by_owner."""

    def test_case_insensitive_any_depth(self, user):
        """Test search matches names at any depth, ignoring case."""
        docs = _folder(user, 'Docs')
        report = _file(user, 'Annual-REPORT.pdf', parent=docs)
        _file(user, 'photo.jpg')

        assert registry.search_by_owner(user.id, 'report') == [report]
        assert registry.count_search(user.id, 'report') == 1

    def test_matches_original_name(self, user):
        """Test the original name is searched too."""
        node = _file(user, 'scan.pdf')
        registry.update_name(node.id, 'Tax return')

        assert registry.search_by_owner(user.id, 'SCAN') == [node]

    def test_other_owner_excluded(self, user, other_user):
        """Test search never shows other users' nodes."""
        _file(other_user, 'report.pdf')

        assert registry.search_by_owner(user.id, 'report') == []


@pytest.mark.django_db
def test_update_name(user):
    """Test renaming keeps the original name."""
    node = _file(user, 'a.txt')

    renamed = registry.update_name(node.id, 'b.txt')

    assert renamed.display_name == 'b.txt'
    assert renamed.original_name == 'a.txt'
    assert renamed.updated_at >= node.updated_at


@pytest.mark.django_db
def test_update_name_unknown(user):
    """Test renaming a missing node gives None."""
    assert registry.update_name(uuid.uuid4(), 'b.txt') is None


@pytest.mark.django_db
class TestDeleteNode:
    """Tests for delete_node."""

    def test_deletes_row(self, user):
        """Test deleting an existing node."""
        node = _file(user, 'a.txt')

        assert registry.delete_node(node.id) is True
        assert not FileNode.objects.filter(id=node.id).exists()

    def test_unknown(self, user):
        """Test deleting a missing node reports False."""
        assert registry.delete_node(uuid.uuid4()) is False

    def test_folder_with_children_refused(self, user):
        """Test a non-empty folder cannot be deleted."""
        docs = _folder(user, 'Docs')
        _file(user, 'a.txt', parent=docs)

        with pytest.raises(RestrictedError):
            registry.delete_node(docs.id)


@pytest.mark.django_db
def test_count_by_owner(user, other_user):
    """Test counting covers every depth and only the owner."""
    docs = _folder(user, 'Docs')
    _file(user, 'a.txt', parent=docs)
    _file(other_user, 'b.txt')

    assert registry.count_by_owner(user.id) == 2


@pytest.mark.django_db
class TestFindByNameAndParent:
    """Tests for find_by_name_and_parent."""

    def test_exact_match_under_parent(self, user):
        """Test lookup is scoped to the parent."""
        docs = _folder(user, 'Docs')
        inner = _folder(user, 'Inner', parent=docs)

        assert registry.find_by_name_and_parent(user.id, 'Inner', docs.id) == inner
        assert registry.find_by_name_and_parent(user.id, 'Inner', None) is None

    def test_kind_filter(self, user):
        """Test a file does not count as a same-named folder."""
        _file(user, 'Docs')

        found = registry.find_by_name_and_parent(
            user.id,
            'Docs',
            None,
            kind=NodeKind.FOLDER,
        )

        assert found is None
