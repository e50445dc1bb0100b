from users_service.main import entrypoint

entrypoint()
