import threading

from shared_db.core.exceptions import UniquenessConflict
from shared_db.models.sql_models import User


def test_concurrent_duplicate_email_single_winner(store):
    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def register(name):
        barrier.wait()
        try:
            store.insert(User, full_name=name, email="race@example.com", password="x")
            result = "ok"
        except UniquenessConflict:
            result = "conflict"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=register, args=(name,)) for name in ("Ngozi", "Emeka")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["conflict", "ok"]
    assert len(store.list(User, email="race@example.com")) == 1
