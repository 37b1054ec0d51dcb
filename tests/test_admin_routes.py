"""
HTTP tests for the admin area and the bookings API.
"""

import pytest

from dancebook.errors import ValidationFailed
from dancebook.stores import CatalogStore


@pytest.fixture
def admin_id(stores, make_user):
    with stores() as services:
        return make_user(services, name='Admin', email='admin@example.com', as_admin=True).id


@pytest.fixture
def as_admin(client, login, admin_id):
    login(email='admin@example.com')
    return client


@pytest.fixture
def course_id(stores):
    with stores() as services:
        return services.catalog.create_course('Salsa', 'Cuban salsa', 'intermediate').id


class TestAccess:

    @pytest.mark.parametrize('path', ['/admin', '/admin/courses', '/admin/classes', '/admin/users'])
    def test_anonymous_rejected(self, client, path):
        assert client.get(path).status_code == 401

    @pytest.mark.parametrize('path', ['/admin', '/admin/courses', '/admin/classes', '/admin/users'])
    def test_regular_user_forbidden(self, client, login, stores, make_user, path):
        with stores() as services:
            make_user(services)
        login()
        assert client.get(path).status_code == 403

    @pytest.mark.parametrize('path', ['/admin', '/admin/courses', '/admin/classes', '/admin/users',
                                      '/admin/courses/new', '/admin/classes/new'])
    def test_admin_pages_render(self, as_admin, path):
        assert as_admin.get(path).status_code == 200


class TestDashboard:

    def test_active_users_counts_confirmed_bookings_of_existing_users(self, as_admin, stores, make_user, make_class):
        with stores() as services:
            class_id = make_class(services).id
            ada = make_user(services)
            bob = make_user(services, name='Bob', email='bob@example.com')
            cy = make_user(services, name='Cy', email='cy@example.com')
            services.workflow.request_booking(ada.id, class_id)
            booking = services.workflow.request_booking(bob.id, class_id)
            services.workflow.request_cancellation(booking.id, bob.id, 'user')
            services.workflow.request_booking(cy.id, class_id)
            services.users.delete(cy.id)

        response = as_admin.get('/admin')
        assert response.status_code == 200
        assert b'(1 with bookings)' in response.data
        assert b'Bookings: 3' in response.data


class TestCourses:

    def test_create_course(self, as_admin, stores):
        response = as_admin.post('/admin/courses/new', data={
            'title': 'Tango', 'description': 'Argentine tango', 'level': 'advanced', 'image_url': '',
        })
        assert response.status_code == 302

        with stores() as services:
            [course] = services.catalog.find_all_courses()
            assert (course.title, course.level, course.image_url) == ('Tango', 'advanced', None)

    def test_duplicate_title(self, as_admin, course_id):
        response = as_admin.post('/admin/courses/new', data={
            'title': 'Salsa', 'description': 'Again', 'level': 'beginner',
        })
        assert response.status_code == 400
        assert b'already exists' in response.data

    def test_invalid_level(self, as_admin):
        response = as_admin.post('/admin/courses/new', data={
            'title': 'Tango', 'description': 'Argentine tango', 'level': 'expert',
        })
        assert response.status_code == 400

    def test_edit_course(self, as_admin, stores, course_id):
        response = as_admin.post(f'/admin/courses/{course_id}/edit', data={
            'title': 'Salsa on2', 'description': 'New York style', 'level': 'advanced',
        })
        assert response.status_code == 302

        with stores() as services:
            assert services.catalog.find_course(course_id).title == 'Salsa on2'

    def test_edit_missing_course(self, as_admin):
        assert as_admin.get('/admin/courses/missing/edit').status_code == 404

    def test_delete_course(self, as_admin, stores, course_id):
        response = as_admin.post(f'/admin/courses/{course_id}/delete')
        assert response.status_code == 200
        assert response.get_json()['success'] is True

        with stores() as services:
            assert services.catalog.find_course(course_id) is None

    def test_delete_course_with_classes_rejected(self, as_admin, stores, make_class):
        with stores() as services:
            course_id = make_class(services).course_id

        response = as_admin.post(f'/admin/courses/{course_id}/delete', headers={'Accept': 'application/json'})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

        with stores() as services:
            assert services.catalog.find_course(course_id) is not None

    def test_delete_missing_course(self, as_admin):
        assert as_admin.post('/admin/courses/missing/delete').status_code == 404


class TestClasses:

    def _form(self, course, **overrides):
        data = {
            'course_id': course,
            'title': 'Salsa basics',
            'description': '',
            'date': '2099-06-01',
            'start_time': '18:00',
            'end_time': '19:00',
            'capacity': '12',
            'instructor': 'Carlos',
            'location': 'Studio 2',
        }
        data.update(overrides)
        return data

    def test_create_class(self, as_admin, stores, course_id):
        response = as_admin.post('/admin/classes/new', data=self._form(course_id))
        assert response.status_code == 302
        assert f'courseId={course_id}' in response.headers['Location']

        with stores() as services:
            [dance_class] = services.catalog.find_classes_by_course(course_id)
            assert dance_class.capacity == 12
            assert str(dance_class.date) == '2099-06-01'

    def test_blank_capacity_uses_default(self, as_admin, stores, course_id):
        as_admin.post('/admin/classes/new', data=self._form(course_id, capacity=''))

        with stores() as services:
            [dance_class] = services.catalog.find_classes_by_course(course_id)
            assert dance_class.capacity == 20

    @pytest.mark.parametrize('overrides', [
        {'capacity': '0'},
        {'start_time': '25:00'},
        {'end_time': '17:00'},
        {'date': 'next tuesday'},
        {'course_id': 'missing'},
    ])
    def test_invalid_class_rejected(self, as_admin, stores, course_id, overrides):
        response = as_admin.post('/admin/classes/new', data=self._form(course_id, **overrides))
        assert response.status_code == 400

        with stores() as services:
            assert services.catalog.find_all_classes() == []

    def test_store_validation_shown_on_form(self, as_admin, stores, course_id, monkeypatch):
        def _course_gone(self, **fields):
            raise ValidationFailed({'course_id': 'Course not found'})

        monkeypatch.setattr(CatalogStore, 'create_class', _course_gone)

        response = as_admin.post('/admin/classes/new', data=self._form(course_id))
        assert response.status_code == 400
        assert b'Create New Class' in response.data
        assert b'Course not found' in response.data

    def test_edit_class(self, as_admin, stores, course_id):
        with stores() as services:
            class_id = services.catalog.create_class(
                course_id=course_id, title='Salsa basics', date='2099-06-01', start_time='18:00',
                end_time='19:00', capacity=10, instructor='Carlos', location='Studio 2',
            ).id

        response = as_admin.post(f'/admin/classes/{class_id}/edit',
                                 data=self._form(course_id, capacity='30', location='Main hall'))
        assert response.status_code == 302

        with stores() as services:
            dance_class = services.catalog.find_class(class_id)
            assert (dance_class.capacity, dance_class.location) == (30, 'Main hall')

    def test_filter_by_course(self, as_admin, stores, make_class, course_id):
        with stores() as services:
            make_class(services, course_title='Ballet')

        response = as_admin.get(f'/admin/classes?courseId={course_id}')
        assert response.status_code == 200
        assert b'Ballet class' not in response.data

    def test_delete_class(self, as_admin, stores, make_class):
        with stores() as services:
            class_id = make_class(services).id

        response = as_admin.post(f'/admin/classes/{class_id}/delete')
        assert response.get_json()['success'] is True
        assert as_admin.post(f'/admin/classes/{class_id}/delete').status_code == 404

    def test_participants(self, as_admin, stores, make_user, make_class):
        with stores() as services:
            class_id = make_class(services).id
            ada = make_user(services)
            services.workflow.request_booking(ada.id, class_id)

        response = as_admin.get(f'/admin/classes/{class_id}/participants')
        assert response.status_code == 200
        assert b'ada@example.com' in response.data
        assert b'1 confirmed of 20' in response.data

    def test_participants_missing_class(self, as_admin):
        assert as_admin.get('/admin/classes/missing/participants').status_code == 404


class TestUsers:

    @pytest.fixture
    def ada_id(self, stores, make_user):
        with stores() as services:
            return make_user(services).id

    def test_list_and_view(self, as_admin, ada_id):
        response = as_admin.get('/admin/users')
        assert b'ada@example.com' in response.data
        assert as_admin.get(f'/admin/users/{ada_id}').status_code == 200
        assert as_admin.get('/admin/users/missing').status_code == 404

    def test_toggle_admin(self, as_admin, stores, ada_id):
        response = as_admin.post(f'/admin/users/{ada_id}/toggle-admin')
        assert response.get_json()['role'] == 'admin'

        response = as_admin.post(f'/admin/users/{ada_id}/toggle-admin')
        assert response.get_json()['role'] == 'user'

        with stores() as services:
            assert services.users.find_by_id(ada_id).role == 'user'

    def test_toggle_missing_user(self, as_admin):
        assert as_admin.post('/admin/users/missing/toggle-admin').status_code == 404

    def test_delete_user(self, as_admin, stores, ada_id):
        response = as_admin.post(f'/admin/users/{ada_id}/delete')
        assert response.get_json()['success'] is True

        with stores() as services:
            assert services.users.find_by_id(ada_id) is None

    def test_cannot_delete_self(self, as_admin, stores, admin_id):
        response = as_admin.post(f'/admin/users/{admin_id}/delete')
        assert response.status_code == 400

        with stores() as services:
            assert services.users.find_by_id(admin_id) is not None


class TestBookingsApi:

    def test_class_bookings(self, as_admin, stores, make_user, make_class):
        with stores() as services:
            class_id = make_class(services).id
            ada = make_user(services)
            services.workflow.request_booking(ada.id, class_id)

        response = as_admin.get(f'/api/bookings/class/{class_id}')
        assert response.status_code == 200
        [booking] = response.get_json()['bookings']
        assert booking['class_id'] == class_id
        assert booking['status'] == 'confirmed'

    def test_regular_user_forbidden(self, client, login, stores, make_user):
        with stores() as services:
            make_user(services)
        login()

        response = client.get('/api/bookings/class/anything')
        assert response.status_code == 403
        assert response.get_json()['success'] is False
