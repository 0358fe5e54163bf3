from hotel_api.models import Role


class TestAdminStats:

    def test_requires_admin(self, client, login):
        assert client.get('/admin/stats').status_code == 401
        assert client.get('/admin/stats', headers=login('guest@example.com')).status_code == 403

    def test_aggregates(self, client, login, make_room):
        suite = make_room(name='Suite', price=200.0)
        standard = make_room(name='Standard', price=80.0)
        empty = make_room(name='Empty', price=50.0)
        guest = login('guest@example.com')
        client.post('/bookings/range', json={'roomId': suite, 'checkIn': '2024-10-01', 'checkOut': '2024-10-03'},
                    headers=guest)
        client.post('/bookings', json={'roomId': standard, 'date': '2024-10-01'}, headers=guest)
        client.post('/bookings', json={'roomId': standard, 'date': '2024-10-02'}, headers=guest)
        client.post('/reviews', json={'roomId': suite, 'rating': 5}, headers=guest)
        client.post('/reviews', json={'roomId': suite, 'rating': 4}, headers=guest)
        headers = login('admin@example.com', role=Role.ADMIN)

        stats = client.get('/admin/stats', headers=headers).get_json()

        assert stats['users'] == 2
        assert stats['rooms'] == 3
        assert stats['bookings'] == 3
        assert stats['bookedNights'] == 4
        assert stats['reviews'] == 2
        assert stats['revenue'] == 560.0

        per_room = {row['roomId']: row for row in stats['perRoom']}
        assert per_room[suite]['bookings'] == 1
        assert per_room[suite]['nights'] == 2
        assert per_room[suite]['revenue'] == 400.0
        assert per_room[suite]['averageRating'] == 4.5
        assert per_room[standard]['bookings'] == 2
        assert per_room[standard]['revenue'] == 160.0
        assert per_room[empty] == {
            'roomId': empty,
            'name': 'Empty',
            'bookings': 0,
            'nights': 0,
            'revenue': 0.0,
            'averageRating': None,
            'reviews': 0,
        }
