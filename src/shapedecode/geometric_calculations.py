from __future__ import annotations

from collections.abc import Sequence

from .types import BBox, Coord, Coords, Point2D


def signed_area(
    coords: Sequence[Coord],
    fast: bool = False,
) -> float:
    """Return the signed area enclosed by a ring using the shoelace
    formula. A value >= 0 indicates a counter-clockwise oriented ring.
    The ring may be given open or closed, and any z or m values are ignored.
    A faster version is possible by setting 'fast' to True, which returns
    2x the area, e.g. if you're only interested in the sign of the area.

    >>> signed_area([(0, 0), (4, 0), (4, 4), (0, 4), (0, 0)])
    16.0
    """
    n = len(coords)
    if n < 3:
        return 0.0
    area2 = 0.0
    for i in range(n):
        x0, y0 = coords[i][0], coords[i][1]
        x1, y1 = coords[(i + 1) % n][0], coords[(i + 1) % n][1]
        area2 += x0 * y1 - x1 * y0
    if fast:
        return area2

    return area2 / 2.0


def is_cw(coords: Sequence[Coord]) -> bool:
    """Returns True if a polygon ring has clockwise orientation, determined
    by a negatively signed area.
    """
    area2 = signed_area(coords, fast=True)
    return area2 < 0


def ring_bbox(coords: Sequence[Coord]) -> BBox:
    """Calculates and returns the bounding box of a ring."""
    xs = [p[0] for p in coords]
    ys = [p[1] for p in coords]
    return min(xs), min(ys), max(xs), max(ys)


def bbox_contains(bbox1: BBox, bbox2: BBox) -> bool:
    """Tests whether bbox1 contains bbox2, edges included."""
    xmin1, ymin1, xmax1, ymax1 = bbox1
    xmin2, ymin2, xmax2, ymax2 = bbox2
    return xmin1 <= xmin2 and xmax2 <= xmax1 and ymin1 <= ymin2 and ymax2 <= ymax1


def ring_contains_point(coords: Sequence[Coord], p: Point2D) -> bool:
    """Fast point-in-polygon crossings algorithm, MacMartin optimization.

    Adapted from code by Eric Haynes
    http://www.realtimerendering.com/resources/GraphicsGems//gemsiv/ptpoly_haines/ptinpoly.c

    Shoot a test ray along +X axis, and count the ring edges it crosses.
    Edges entirely to one side of the ray are discarded by comparing
    their vertex Y values to the test point's Y.
    """
    tx, ty = p

    vtx0 = coords[0]
    yflag0 = vtx0[1] >= ty

    inside_flag = False
    for vtx1 in coords[1:]:
        yflag1 = vtx1[1] >= ty
        # endpoints straddle the ray's line
        if yflag0 != yflag1:
            xflag0 = vtx0[0] >= tx
            if xflag0 == (vtx1[0] >= tx):
                # both endpoints right of the point, must hit
                if xflag0:
                    inside_flag = not inside_flag
            else:
                if (
                    vtx1[0] - (vtx1[1] - ty) * (vtx0[0] - vtx1[0]) / (vtx0[1] - vtx1[1])
                ) >= tx:
                    inside_flag = not inside_flag

        yflag0 = yflag1
        vtx0 = vtx1

    return inside_flag


def ring_contains_ring(coords1: Sequence[Coord], coords2: Sequence[Coord]) -> bool:
    """Returns True if all vertexes in coords2 are fully inside coords1."""
    return all(ring_contains_point(coords1, (p2[0], p2[1])) for p2 in coords2)


def organize_polygon_rings(
    rings: Sequence[Coords], return_errors: dict[str, int] | None = None
) -> list[list[Coords]]:
    """Organize a list of coordinate rings into one or more polygons with holes.
    Returns a list of polygons, where each polygon is composed of a single exterior
    ring followed by its interior holes. If a return_errors dict is provided
    (optional), any problems encountered will be counted in it.

    Rings must be in OGC order, as decoded from a shapefile: exteriors run
    counter-clockwise and holes clockwise. The shapefile format does not store
    which exterior a hole belongs to, so each hole is given to the smallest
    exterior that contains it.
    """
    exteriors: list[Coords] = []
    holes: list[Coords] = []
    for ring in rings:
        if is_cw(ring):
            holes.append(ring)
        else:
            exteriors.append(ring)

    if not exteriors:
        # be nice and assume an incorrect winding order
        if return_errors is not None and holes:
            return_errors["polygon_only_holes"] = len(holes)
        return [[hole] for hole in holes]

    if len(exteriors) == 1:
        return [[exteriors[0], *holes]]

    polys: list[list[Coords]] = [[ext] for ext in exteriors]
    exterior_bboxes = [ring_bbox(ext) for ext in exteriors]
    orphan_holes: list[Coords] = []
    for hole in holes:
        hole_bbox = ring_bbox(hole)
        candidates = [
            ext_i
            for ext_i, ext_bbox in enumerate(exterior_bboxes)
            if bbox_contains(ext_bbox, hole_bbox)
        ]
        if len(candidates) > 1:
            # vertexes lying on an exterior's boundary can fail the test,
            # so keep the bbox candidates if none passes
            candidates = [
                ext_i for ext_i in candidates if ring_contains_ring(exteriors[ext_i], hole)
            ] or candidates
        if not candidates:
            orphan_holes.append(hole)
            continue
        parent = min(candidates, key=lambda ext_i: abs(signed_area(exteriors[ext_i])))
        polys[parent].append(hole)

    # orphaned holes are kept, as exteriors without holes
    polys.extend([hole] for hole in orphan_holes)
    if orphan_holes and return_errors is not None:
        return_errors["polygon_orphaned_holes"] = len(orphan_holes)

    return polys
