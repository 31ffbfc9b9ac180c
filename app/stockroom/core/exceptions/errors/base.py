from fastapi import status
from fastapi_problem.error import StatusProblem


class ServiceError(StatusProblem):
    """
    This error is raised when a service-related error occurs.

    Every error in the application derives from it.
    """

    type_ = "service_error"
    title = "Service Error"
    detail = "An error occurred while processing your request."
    status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail=None, **kwargs):
        super().__init__(detail=detail or self.detail, **kwargs)


class ValidationError(ServiceError):
    """
    This error is raised when input is malformed (blank name, non-positive quantity, empty item list).

    It is always raised before the store is touched.
    """

    type_ = "validation_error"
    title = "Validation Error"
    detail = "The submitted data is invalid."
    status = status.HTTP_422_UNPROCESSABLE_ENTITY


class NotFoundError(ServiceError):
    """
    This error is raised when a requested resource is not found.
    """

    type_ = "not_found_error"
    title = "Resource Not Found"
    detail = "The requested resource could not be found."
    status = status.HTTP_404_NOT_FOUND


class InternalServerError(ServiceError):
    """
    This error is raised when an unexpected internal server error occurs.
    """

    type_ = "internal_server_error"
    title = "Internal Server Error"
    detail = "An unexpected error occurred on the server."
    status = status.HTTP_500_INTERNAL_SERVER_ERROR
