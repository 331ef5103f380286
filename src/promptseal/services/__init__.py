"""Service layer — every operation returns a :class:`ServiceResult`."""
