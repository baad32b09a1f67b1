from trellis.core.services.resource import ResourceService


class TasksService(ResourceService):
    resource = "tasks"
