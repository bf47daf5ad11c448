from db import Database
from domain.models import Role
from repositories import UsersRepository
from scripts import create_admin
from services.passwords import verify_password


def test_creates_admin(settings):
    code = create_admin.main(
        ["--username", "root", "--email", "root@elexandria.com", "--password", "segredo1"], settings=settings
    )
    assert code == 0
    database = Database(settings)
    with database.session() as session:
        repo = UsersRepository()
        user, hashed = repo.get_credentials(session, "root")
        assert user.role == Role.ADMIN
        assert verify_password("segredo1", hashed)
        assert hashed != "segredo1"
    database.dispose()


def test_promotes_existing_user(settings, database, session):
    UsersRepository().create_user(session, "ana", "x", "ana@leitores.org", "Ana")
    assert create_admin.main(["--username", "ana"], settings=settings) == 0
    session.expire_all()
    assert UsersRepository().get_user_by_username(session, "ana").role == Role.ADMIN


def test_rejects_short_password(settings):
    code = create_admin.main(
        ["--username", "root", "--email", "root@elexandria.com", "--password", "123"], settings=settings
    )
    assert code == 1


def test_duplicate_email_fails_cleanly(settings, database, session):
    UsersRepository().create_user(session, "ana", "x", "ana@leitores.org", "Ana")
    code = create_admin.main(
        ["--username", "root", "--email", "ana@leitores.org", "--password", "segredo1"], settings=settings
    )
    assert code == 1
