from hoardingadmin_firestoredb.schemas.user import UserInput, UserRole, UserUpdate
from hoardingadmin_firestoredb.schemas.worker import TaskInput, WorkerInput
from hoardingadmin_firestoredb.utils.error_codes import ErrorCodes


async def test_list_users_newest_first(context, seeded):
    response = await context.users.get_all_users()
    assert [user.id for user in response.data] == ["u3", "u2", "u1", "admin1"]


async def test_create_user(context, store):
    response = await context.users.create_user(UserInput(name="Kiran", email="kiran@example.com", phone="98"))

    assert response.code == ErrorCodes.CREATED
    stored = store.data(f"users/{response.data.id}")
    assert stored["name"] == "Kiran"
    assert stored["role"] == UserRole.USER.value
    assert stored["createdAt"] == stored["updatedAt"]


async def test_create_user_validation(context, store):
    assert (await context.users.create_user(UserInput(name=" ", email="a@b.c"))).code == ErrorCodes.BAD_REQUEST
    assert (await context.users.create_user(UserInput(name="A", email=""))).code == ErrorCodes.BAD_REQUEST
    assert store.ids("users") == []


async def test_update_user(context, seeded):
    response = await context.users.update_user("u1", UserUpdate(phone="9111111111"))

    assert response.data.phone == "9111111111"
    assert response.data.name == "Asha Rao"
    assert seeded.data("users/u1")["phone"] == "9111111111"
    assert (await context.users.update_user("u1", UserUpdate())).code == ErrorCodes.BAD_REQUEST
    assert (await context.users.update_user("u1", UserUpdate(name=""))).code == ErrorCodes.BAD_REQUEST
    assert (await context.users.update_user("nope", UserUpdate(name="X"))).code == ErrorCodes.NOT_FOUND


async def test_delete_and_toggle_user(context, seeded):
    toggled = await context.users.toggle_user_active("u2")
    deleted = await context.users.delete_user("u3")

    assert toggled.data.active is False
    assert seeded.data("users/u2")["active"] is False
    assert deleted.status
    assert seeded.data("users/u3") is None
    assert (await context.users.delete_user("u3")).code == ErrorCodes.NOT_FOUND
    assert (await context.users.get_user("u3")).code == ErrorCodes.NOT_FOUND


async def test_customers_and_search(context, seeded):
    customers = await context.users.get_customers()
    found = await context.users.search_users("RAVI@")

    assert sorted(user.id for user in customers.data) == ["u1", "u2", "u3"]
    assert [user.id for user in found.data] == ["u2"]


async def test_create_worker_makes_account_and_profile(context, store, identity):
    response = await context.workers.create_worker(WorkerInput(name="Suresh", email="suresh@example.com", password="secret123"))

    assert response.code == ErrorCodes.CREATED
    uid = response.data.id
    assert identity.accounts["suresh@example.com"]["localId"] == uid
    assert identity.accounts["suresh@example.com"]["displayName"] == "Suresh"
    stored = store.data(f"workers/{uid}")
    assert stored["role"] == "worker"
    assert "password" not in stored


async def test_create_worker_errors(context, store, identity):
    identity.add_account("existing", "taken@example.com")

    no_password = await context.workers.create_worker(WorkerInput(name="A", email="a@example.com"))
    duplicate = await context.workers.create_worker(WorkerInput(name="B", email="taken@example.com", password="secret123"))

    assert no_password.code == ErrorCodes.BAD_REQUEST
    assert duplicate.code == ErrorCodes.CONFLICT
    assert duplicate.error_message == "This email is already registered"
    assert store.ids("workers") == []


async def test_update_worker_never_changes_password(context, store, identity):
    created = await context.workers.create_worker(WorkerInput(name="Suresh", email="suresh@example.com", password="secret123"))
    worker_id = created.data.id

    response = await context.workers.update_worker(worker_id, WorkerInput(name="Suresh K", email="suresh@example.com", password="newpass99", active=False))

    assert response.data.name == "Suresh K"
    assert "password reset" in response.message
    assert identity.accounts["suresh@example.com"]["password"] == "secret123"
    assert store.data(f"workers/{worker_id}")["active"] is False


async def test_worker_tasks(context, store):
    created = await context.workers.create_worker(WorkerInput(name="Suresh", email="suresh@example.com", password="secret123"))
    worker_id = created.data.id

    assigned = await context.workers.assign_task(worker_id, TaskInput(location="MG Road", task_description="Replace flex"))
    tasks = await context.workers.get_worker_tasks(worker_id)

    assert assigned.code == ErrorCodes.CREATED
    assert assigned.message == "Task assigned successfully to Suresh"
    assert [task.task_description for task in tasks.data] == ["Replace flex"]
    assert tasks.data[0].status == "assigned"
    assert store.data(f"workers/{worker_id}/tasks/{assigned.data.id}")["taskDescription"] == "Replace flex"


async def test_assign_task_errors(context, store):
    assert (await context.workers.assign_task("", TaskInput(location="x", task_description="y"))).code == ErrorCodes.BAD_REQUEST
    assert (await context.workers.assign_task("w1", TaskInput(location=" ", task_description="y"))).code == ErrorCodes.BAD_REQUEST
    assert (await context.workers.assign_task("w1", TaskInput(location="x", task_description="y"))).code == ErrorCodes.NOT_FOUND


async def test_toggle_and_delete_worker(context, store):
    created = await context.workers.create_worker(WorkerInput(name="Suresh", email="suresh@example.com", password="secret123"))
    worker_id = created.data.id

    assert (await context.workers.toggle_worker_active(worker_id)).data.active is False
    assert (await context.workers.delete_worker(worker_id)).status
    assert (await context.workers.get_worker(worker_id)).code == ErrorCodes.NOT_FOUND
