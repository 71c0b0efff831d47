import unittest
from unittest import TestCase

from parameterized import parameterized

from wifi_station import CredentialShare


class CredentialShareTest(TestCase):

    def setUp(self):
        print()

    @parameterized.expand([
        ('home', 'secret123', 'WIFI:T:WPA;S:home;P:secret123;;'),
        ('cafe;bar', 'a:b', 'WIFI:T:WPA;S:cafe\\;bar;P:a\\:b;;'),
        ('"quoted"', 'back\\slash,comma', 'WIFI:T:WPA;S:\\"quoted\\";P:back\\\\slash\\,comma;;'),
    ])
    def test_payload(self, ssid, passphrase, expected):
        # Given
        share = CredentialShare(ssid, passphrase)

        # When
        result = share.to_payload()

        # Then
        self.assertEqual(expected, result)


if __name__ == '__main__':
    unittest.main()
