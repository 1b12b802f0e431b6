"""
Write-side rejections surfaced to the API layer.
"""
from rest_framework import status
from rest_framework.exceptions import APIException, PermissionDenied


class WriteRejected(PermissionDenied):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to change this record.'
    default_code = 'WRITE_REJECTED'

    def error_data(self):
        return None


class NoWritableSections(WriteRejected):
    """The caller's roles can write no section at all."""
    default_detail = 'Your roles do not grant write access to any section.'
    default_code = 'NO_SECTION_ACCESS'


class NoAcceptedFields(WriteRejected):
    """Every requested field was filtered out."""
    default_detail = 'None of the requested fields can be changed with your roles.'
    default_code = 'NO_ACCEPTED_FIELDS'

    def __init__(self, rejected=None, detail=None, code=None):
        super().__init__(detail=detail, code=code)
        self.rejected = list(rejected or [])

    def error_data(self):
        return {'rejected': self.rejected}


class CatalogEntryMissing(APIException):
    """A role or column could not be found in, or added to, its catalog table."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Catalog entry could not be resolved.'
    default_code = 'CATALOG_ENTRY_MISSING'
