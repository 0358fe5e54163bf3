class TestReviews:

    def test_create_review(self, client, login, make_room):
        room_id = make_room()
        headers = login('guest@example.com', name='Guest')

        response = client.post('/reviews', json={'roomId': room_id, 'rating': 5, 'comment': 'Lovely stay',
                                                 'userEmail': 'someone@else.com'}, headers=headers)

        assert response.status_code == 201
        body = response.get_json()
        assert body['userEmail'] == 'guest@example.com'
        assert body['username'] == 'Guest'
        assert body['rating'] == 5

    def test_review_validation(self, client, login, make_room):
        room_id = make_room()
        headers = login('guest@example.com')

        assert client.post('/reviews', json={'roomId': room_id, 'rating': 6}, headers=headers).status_code == 400
        assert client.post('/reviews', json={'roomId': room_id, 'rating': '5'}, headers=headers).status_code == 400
        assert client.post('/reviews', json={'roomId': 999, 'rating': 4}, headers=headers).status_code == 404
        assert client.post('/reviews', json={'roomId': room_id, 'rating': 4}).status_code == 401

    def test_room_reviews_newest_first(self, client, login, make_room):
        room_id = make_room()
        other_room = make_room(name='Other')
        headers = login('guest@example.com')
        for comment in ('first', 'second'):
            client.post('/reviews', json={'roomId': room_id, 'rating': 4, 'comment': comment}, headers=headers)
        client.post('/reviews', json={'roomId': other_room, 'rating': 3, 'comment': 'elsewhere'}, headers=headers)

        reviews = client.get(f'/reviews/{room_id}').get_json()

        assert [r['comment'] for r in reviews] == ['second', 'first']

    def test_all_reviews_paginated(self, client, login, make_room):
        room_id = make_room()
        headers = login('guest@example.com')
        for i in range(5):
            client.post('/reviews', json={'roomId': room_id, 'rating': 4, 'comment': f'#{i}'}, headers=headers)

        first_page = client.get('/reviews?page=1&limit=2')
        last_page = client.get('/reviews?page=3&limit=2')

        assert first_page.headers['X-Total-Count'] == '5'
        assert [r['comment'] for r in first_page.get_json()] == ['#4', '#3']
        assert [r['comment'] for r in last_page.get_json()] == ['#0']
