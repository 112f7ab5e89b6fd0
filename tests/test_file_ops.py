from __future__ import annotations

import errno
import os

import pytest

from rootbound.errors import ErrorKind, FsError, Outcome
from rootbound.services import file_ops


@pytest.fixture
def root(tmp_path):
    base = tmp_path / 'root'
    base.mkdir()
    (base / 'a').mkdir()
    (base / 'a' / 'x.txt').write_text('payload')
    (base / 'b.txt').write_text('')
    return base


def test_rename_file_in_place(root):
    result = file_ops.rename(str(root), 'a/x.txt', 'y.txt')

    assert result.outcome is Outcome.APPLIED
    assert not (root / 'a' / 'x.txt').exists()
    assert (root / 'a' / 'y.txt').read_text() == 'payload'


def test_rename_directory_is_rejected_and_untouched(root):
    with pytest.raises(FsError) as exc:
        file_ops.rename(root, 'a', 'renamed')

    assert exc.value.kind is ErrorKind.NOT_A_FILE
    assert (root / 'a' / 'x.txt').exists()
    assert not (root / 'renamed').exists()


@pytest.mark.parametrize('name', ['', '.', '..', 'sub/name.txt', '../up.txt', 'nul\x00.txt'])
def test_rename_rejects_names_that_are_not_single_components(root, name):
    with pytest.raises(FsError) as exc:
        file_ops.rename(root, 'b.txt', name)

    assert exc.value.kind is ErrorKind.INVALID_PATH
    assert (root / 'b.txt').exists()


def test_rename_refuses_to_overwrite_existing_destination(root):
    (root / 'a' / 'taken.txt').write_text('keep me')

    with pytest.raises(FsError) as exc:
        file_ops.rename(root, 'a/x.txt', 'taken.txt')

    assert exc.value.kind is ErrorKind.RENAME_FAILED
    assert exc.value.http_status == 409
    assert (root / 'a' / 'taken.txt').read_text() == 'keep me'
    assert (root / 'a' / 'x.txt').read_text() == 'payload'


def test_rename_to_same_name_is_noop(root):
    result = file_ops.rename(root, 'b.txt', 'b.txt')

    assert result.outcome is Outcome.APPLIED
    assert (root / 'b.txt').exists()


def test_rename_missing_file_is_invalid_path(root):
    with pytest.raises(FsError) as exc:
        file_ops.rename(root, 'ghost.txt', 'new.txt')

    assert exc.value.kind is ErrorKind.INVALID_PATH


def test_rename_wraps_os_errors(root, monkeypatch):
    def _fail(_src, _dst):
        raise PermissionError(errno.EACCES, 'Permission denied')

    monkeypatch.setattr(file_ops.os, 'rename', _fail)

    with pytest.raises(FsError) as exc:
        file_ops.rename(root, 'b.txt', 'c.txt')

    assert exc.value.kind is ErrorKind.RENAME_FAILED
    assert 'Permission denied' in exc.value.message


def test_delete_removes_single_file(root):
    file_ops.delete(root, 'a/x.txt')

    assert not (root / 'a' / 'x.txt').exists()
    assert (root / 'a').is_dir()


def test_delete_directory_is_rejected(root):
    with pytest.raises(FsError) as exc:
        file_ops.delete(root, 'a')

    assert exc.value.kind is ErrorKind.NOT_A_FILE
    assert (root / 'a' / 'x.txt').exists()


def test_delete_symlink_is_rejected(root):
    os.symlink(root / 'b.txt', root / 'alias.txt')

    with pytest.raises(FsError) as exc:
        file_ops.delete(root, 'alias.txt')

    assert exc.value.kind is ErrorKind.NOT_A_FILE
    assert (root / 'b.txt').exists()
    assert (root / 'alias.txt').is_symlink()


def test_delete_wraps_os_errors(root, monkeypatch):
    def _fail(self, missing_ok=False):
        raise PermissionError(errno.EBUSY, 'Device or resource busy')

    monkeypatch.setattr(file_ops.Path, 'unlink', _fail)

    with pytest.raises(FsError) as exc:
        file_ops.delete(root, 'b.txt')

    assert exc.value.kind is ErrorKind.DELETE_FAILED


@pytest.mark.parametrize('destination', ['', '.', '/', '  '])
def test_move_root_aliases_land_file_directly_under_root(root, destination):
    result = file_ops.move(root, 'a/x.txt', destination, False)

    assert result.outcome is Outcome.APPLIED
    assert result.created == ()
    assert (root / 'x.txt').read_text() == 'payload'
    assert not (root / 'a' / 'x.txt').exists()


def test_move_into_existing_directory_with_leading_slash(root):
    (root / 'dest').mkdir()

    file_ops.move(root, 'b.txt', '/dest', False)

    assert (root / 'dest' / 'b.txt').exists()
    assert not (root / 'b.txt').exists()


def test_move_missing_destination_without_create(root):
    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'b.txt', 'new/dir', False)

    assert exc.value.kind is ErrorKind.DESTINATION_MISSING
    assert exc.value.outcome is Outcome.UNCHANGED
    assert not (root / 'new').exists()
    assert (root / 'b.txt').exists()


def test_move_creates_destination_chain(root):
    result = file_ops.move(root, 'b.txt', 'new/dir', True)

    assert result.outcome is Outcome.APPLIED
    assert result.created == ('new', 'new/dir')
    assert (root / 'new' / 'dir' / 'b.txt').exists()


def test_move_destination_that_is_a_file(root):
    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'a/x.txt', 'b.txt', True)

    assert exc.value.kind is ErrorKind.DESTINATION_MISSING
    assert (root / 'a' / 'x.txt').exists()


def test_move_directory_source_is_rejected(root):
    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'a', '', False)

    assert exc.value.kind is ErrorKind.NOT_A_FILE


def test_move_refuses_to_overwrite(root):
    (root / 'x.txt').write_text('existing')

    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'a/x.txt', '', False)

    assert exc.value.kind is ErrorKind.MOVE_FAILED
    assert exc.value.http_status == 409
    assert (root / 'x.txt').read_text() == 'existing'
    assert (root / 'a' / 'x.txt').read_text() == 'payload'


def test_move_into_own_directory_is_noop(root):
    result = file_ops.move(root, 'a/x.txt', 'a', False)

    assert result.outcome is Outcome.APPLIED
    assert (root / 'a' / 'x.txt').exists()


def test_move_failure_after_create_reports_partial_state(root, monkeypatch):
    def _fail(_src, _dst):
        raise OSError(errno.EXDEV, 'Invalid cross-device link')

    monkeypatch.setattr(file_ops.os, 'rename', _fail)

    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'b.txt', 'made/here', True)

    assert exc.value.kind is ErrorKind.MOVE_FAILED
    assert 'cross-device' in exc.value.message
    assert exc.value.outcome is Outcome.PARTIAL
    assert exc.value.residual == ('made', 'made/here')
    # directories created before the failure are left in place
    assert (root / 'made' / 'here').is_dir()
    assert (root / 'b.txt').exists()


def test_move_failure_without_create_is_unchanged(root, monkeypatch):
    def _fail(_src, _dst):
        raise PermissionError(errno.EACCES, 'Permission denied')

    monkeypatch.setattr(file_ops.os, 'rename', _fail)

    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'b.txt', 'a', False)

    assert exc.value.kind is ErrorKind.MOVE_FAILED
    assert exc.value.outcome is Outcome.UNCHANGED
    assert exc.value.residual == ()


def test_create_folder_is_idempotent(root):
    first = file_ops.create_folder(root, 'photos/2024')
    tree_after_first = sorted(str(p.relative_to(root)) for p in root.rglob('*'))
    second = file_ops.create_folder(root, 'photos/2024')

    assert first.created == ('photos', 'photos/2024')
    assert second.created == ()
    assert sorted(str(p.relative_to(root)) for p in root.rglob('*')) == tree_after_first


def test_create_folder_over_existing_file_fails(root):
    with pytest.raises(FsError) as exc:
        file_ops.create_folder(root, 'b.txt')

    assert exc.value.kind is ErrorKind.CREATE_FAILED
    assert exc.value.outcome is Outcome.UNCHANGED
    assert (root / 'b.txt').is_file()


def test_create_folder_below_a_file_fails(root):
    with pytest.raises(FsError) as exc:
        file_ops.create_folder(root, 'b.txt/sub')

    assert exc.value.kind is ErrorKind.CREATE_FAILED


def test_create_folder_permission_error(root, monkeypatch):
    def _fail(self, mode=0o777, parents=False, exist_ok=False):
        raise PermissionError(errno.EACCES, 'Permission denied')

    monkeypatch.setattr(file_ops.Path, 'mkdir', _fail)

    with pytest.raises(FsError) as exc:
        file_ops.create_folder(root, 'locked')

    assert exc.value.kind is ErrorKind.CREATE_FAILED
    assert 'Permission denied' in exc.value.message


def test_operations_reject_invalid_root(tmp_path):
    missing = tmp_path / 'missing'

    for call in (
        lambda: file_ops.rename(missing, 'a', 'b'),
        lambda: file_ops.delete(missing, 'a'),
        lambda: file_ops.move(missing, 'a', '', False),
        lambda: file_ops.create_folder(missing, 'a'),
    ):
        with pytest.raises(FsError) as exc:
            call()
        assert exc.value.kind is ErrorKind.INVALID_ROOT


def test_move_onto_hard_link_of_source_is_rejected(root):
    (root / 'd').mkdir()
    os.link(root / 'b.txt', root / 'd' / 'b.txt')

    with pytest.raises(FsError) as exc:
        file_ops.move(root, 'b.txt', 'd', False)

    assert exc.value.kind is ErrorKind.MOVE_FAILED
    assert exc.value.http_status == 409
    assert (root / 'b.txt').exists()


def test_rename_onto_hard_link_of_target_is_rejected(root):
    os.link(root / 'a' / 'x.txt', root / 'a' / 'twin.txt')

    with pytest.raises(FsError) as exc:
        file_ops.rename(root, 'a/x.txt', 'twin.txt')

    assert exc.value.kind is ErrorKind.RENAME_FAILED
    assert exc.value.http_status == 409
    assert (root / 'a' / 'x.txt').exists()


def test_move_into_directory_with_surrounding_spaces(root):
    (root / ' spaced ').mkdir()

    file_ops.move(root, 'b.txt', ' spaced ', False)

    assert (root / ' spaced ' / 'b.txt').exists()
    assert not (root / 'b.txt').exists()
