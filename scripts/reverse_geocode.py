# Reverse geocodes "lat,lng" pairs and prints the best match for each
from argparse import ArgumentParser
import logging

from mapbox_client import Coordinate, FeatureType, MapboxClient, MapboxClientError, ReverseGeocodeRequest


def parse_point(value: str) -> Coordinate:
    lat, lng = (float(v) for v in value.split(','))
    return Coordinate(lat=lat, lng=lng)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    parser = ArgumentParser()
    parser.add_argument('points', nargs='+', type=parse_point, help='lat,lng pairs')
    parser.add_argument('--types', '-t', nargs='*', default=[], type=FeatureType)
    parser.add_argument('--language', '-l', type=str, default='')
    parser.add_argument('--workers', '-w', type=int, default=4)
    args = parser.parse_args()

    requests = [
        ReverseGeocodeRequest(point, language=args.language, limit=1, types=args.types)
        for point in args.points
    ]

    with MapboxClient.from_env() as client:
        results = client.reverse_geocode_many(requests, n_workers=args.workers, show_progress=True)

    for point, result in zip(args.points, results):
        if isinstance(result, MapboxClientError):
            print(f'{point.lat},{point.lng}\tERROR\t{result}')
        elif result.features and result.features[0].properties is not None:
            print(f'{point.lat},{point.lng}\t{result.features[0].properties.full_address or result.features[0].properties.name}')
        else:
            print(f'{point.lat},{point.lng}\tNO MATCH')
