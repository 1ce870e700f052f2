"""A small two-layer network that sorts 32x32 RGB565 images into CIFAR-10 classes."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

INPUT_SIDE = 32
INPUT_PIXELS = INPUT_SIDE * INPUT_SIDE
POOL_SIDE = 4
POOL_WINDOW = INPUT_SIDE // POOL_SIDE
FEATURE_COUNT = 3 * POOL_SIDE * POOL_SIDE
HIDDEN_COUNT = 16

CLASS_NAMES: tuple[str, ...] = (
    "plane", "car", "bird", "cat", "deer",
    "dog", "frog", "horse", "ship", "truck",
)

FC1_WEIGHT: tuple[tuple[float, ...], ...] = (
    (-0.015514, -0.088211, -0.039722, 0.117178, 0.017408, 0.138527, 0.053820, 0.073875, -0.005791, 0.746798, 0.657041, 0.070830, 0.225954, -0.308882, -0.235034, 0.278682, 0.113728, 0.251466, 0.153976, 0.107867, 0.006614, 0.407585, 0.484569, 0.116353, -0.430982, -0.142089, 0.037410, -0.513894, 0.355240, -0.478123, -0.383179, 0.358733, -0.174926, -0.428504, -0.368023, -0.308149, -0.037760, 0.216601, 0.298783, 0.031938, -0.220893, 0.189898, -0.028883, -0.151448, 0.704433, -0.214535, -0.153832, 0.629968),
    (0.211004, 0.373176, 0.451919, 0.249522, -0.051107, 0.279318, 0.238714, -0.162176, -0.248161, -0.182048, -0.144041, -0.176025, 0.223375, 0.425620, 0.353234, 0.321384, 0.304944, 0.417434, 0.178340, 0.123304, 0.194598, 0.408501, 0.408182, 0.272740, 0.342005, 0.632221, 0.591183, 0.218385, 0.063949, 0.348312, 0.176023, 0.093819, -0.502171, -0.340777, -0.340858, -0.388133, -0.367714, -0.384479, -0.379754, -0.250282, -0.483701, -0.406614, -0.254140, -0.569033, -0.957596, -0.679201, -0.645507, -0.985158),
    (-0.222305, 0.357820, 0.413368, -0.328653, -0.349465, 0.638772, 0.619809, -0.313037, -0.410935, 0.206106, -0.028145, -0.137495, -0.081299, 0.426119, 0.348921, -0.085323, -0.446056, 0.167524, -0.072052, -0.446134, -0.164663, -0.084830, 0.067498, -0.188040, -0.132758, 0.160241, 0.263640, -0.043962, -0.438418, 0.345989, 0.187574, -0.196629, -0.252832, 0.396072, 0.463655, -0.135488, -0.090061, 0.282268, 0.254534, -0.035225, -0.290519, 0.424309, 0.357411, -0.305412, -0.120640, 0.177832, 0.418994, -0.110711),
    (0.071822, 0.018676, -0.019438, -0.098413, -0.085624, -0.975322, -0.801716, -0.008833, 0.044639, 0.135227, -0.161836, 0.058186, -0.162301, -0.256694, -0.405506, -0.162358, -0.130927, 0.069692, 0.230814, -0.052323, -0.134171, -0.086304, -0.174287, -0.111972, -0.170096, -0.090665, -0.039175, -0.125515, -0.217727, -0.298437, -0.208359, -0.094748, -0.137765, 0.331672, 0.314422, -0.179982, 0.091008, 0.855098, 0.774743, 0.039188, 0.354933, 0.961344, 1.050579, 0.360739, 0.140772, 0.349634, 0.418244, 0.088467),
    (0.040732, -0.099356, 0.024710, -0.110080, -0.146270, 0.057546, -0.096038, -0.004496, -0.051815, -0.139569, 0.006397, -0.040391, 0.047810, 0.088892, -0.087647, 0.115906, -0.045255, -0.033808, 0.066430, 0.106420, 0.034320, 0.116059, -0.107708, 0.024980, 0.075650, -0.092586, 0.052835, -0.001890, -0.060490, -0.147316, 0.011828, -0.113090, -0.109265, 0.118315, -0.083997, 0.007142, 0.110117, 0.033484, -0.150746, 0.117204, -0.089864, 0.062143, 0.073794, 0.074988, -0.125091, -0.128286, -0.054639, 0.033037),
    (-0.199697, -0.109135, -0.176615, -0.008060, -0.331077, 0.169463, 0.161629, -0.302794, -0.114782, -0.034521, -0.010572, -0.049234, -0.376581, 0.236895, 0.349495, -0.635496, -0.189707, -0.265898, -0.157195, -0.083742, -0.052662, -0.058757, 0.070783, 0.066302, 0.433040, 0.275497, 0.263567, 0.536427, -0.142085, 0.691105, 0.545850, -0.068363, 0.283720, 0.271818, 0.215584, 0.188327, 0.383381, -0.173238, -0.082767, 0.293119, 0.446850, -0.228042, -0.314930, 0.263006, -0.077279, 0.272382, 0.118748, -0.169581),
    (0.214373, -0.025929, -0.041318, 0.147353, -0.130038, 0.158919, 0.100474, 0.031474, 0.069397, 0.528361, 0.536458, 0.101750, -0.118008, -0.143879, -0.132736, -0.062153, 0.471497, 0.183725, 0.158250, 0.527949, -0.327323, -0.384158, -0.323676, -0.422274, -0.358399, -0.169322, -0.088330, -0.497008, 0.032958, -0.079783, 0.004370, -0.084969, 0.924646, 0.738420, 0.653708, 0.853857, -0.163108, 0.151562, 0.057630, -0.454387, -0.763038, -0.067637, 0.097983, -0.607820, -0.409349, -0.194184, -0.179827, -0.328531),
    (-0.072560, -0.449108, -0.332057, -0.077448, 0.168459, -0.244939, -0.276485, 0.076537, -0.057319, -0.567014, -0.533343, -0.186537, 0.396644, 0.204006, 0.344079, 0.471821, 0.083795, 0.145007, 0.043014, 0.049422, -0.214537, -0.010120, 0.141963, -0.172904, -0.621180, -0.902852, -0.737517, -0.642247, 0.315803, 0.504864, 0.473638, 0.169193, 0.104541, 0.419247, 0.171063, 0.106957, 0.017110, 1.011918, 0.988502, 0.006039, -0.270292, 0.082646, -0.064731, -0.269532, -0.018728, 0.403535, 0.326500, 0.101861),
    (0.240925, -0.203519, -0.024748, 0.236937, -0.234005, -0.478011, -0.336528, -0.224305, -0.445075, -0.140883, -0.040994, -0.132474, -0.717484, -0.153987, -0.132936, -0.622635, 0.310577, 0.023444, 0.200146, 0.409342, 0.185330, 0.277158, 0.310101, 0.143441, 0.031285, -0.091622, 0.123097, 0.105456, -0.363075, -0.210904, -0.084533, -0.349374, 0.609830, 0.196873, 0.214657, 0.498035, 0.407198, 0.124741, 0.111405, 0.323547, 0.238275, 0.097875, 0.026391, 0.296683, 0.608882, 0.482985, 0.613027, 0.445177),
    (0.086272, 0.253242, 0.261644, 0.174868, -0.102999, -0.177567, -0.134918, -0.077480, -0.203921, -0.522307, -0.516808, -0.165591, 0.105598, 0.448577, 0.512045, 0.181272, -0.060691, 0.120883, 0.089306, -0.134721, 0.260052, -0.147713, -0.101962, 0.116597, 0.415860, 0.220966, 0.239734, 0.500762, 0.150335, 0.354546, 0.482494, 0.250278, -0.127161, -0.120448, -0.196991, -0.102223, 0.321876, -0.580724, -0.519657, 0.200095, 0.200625, -0.202642, -0.264198, 0.398171, -0.057850, 0.330676, 0.273455, 0.031536),
    (-0.168968, -0.318655, -0.346490, -0.140375, -0.117563, -0.268782, -0.322546, -0.121755, 0.168988, -0.389575, -0.436307, 0.220088, 0.035319, 0.007174, 0.274250, 0.206930, -0.220839, -0.068462, 0.058155, -0.221650, 0.178828, -0.214629, -0.153809, 0.152701, 0.525921, 0.073650, 0.006651, 0.454731, 0.141539, 0.520735, 0.423911, 0.059093, 0.037416, 0.279260, 0.415714, 0.078216, 0.035434, 0.635053, 0.639576, 0.093937, 0.093024, 0.195854, 0.284343, 0.100367, -0.613331, -0.091776, -0.109716, -0.745495),
    (0.404053, 0.323262, 0.438100, 0.180114, 0.063206, 0.021977, 0.228753, -0.119276, -0.374753, 0.191532, 0.349669, -0.448280, -0.214766, 0.501495, 0.370706, -0.053476, -0.230872, -0.011565, -0.123950, -0.230391, -0.143775, 0.330952, 0.211420, -0.284699, -0.411762, 0.365196, 0.242866, -0.385704, -0.497331, -0.074382, 0.041283, -0.532233, -0.135579, -0.338449, -0.392743, -0.282020, 0.174202, -0.392250, -0.399623, -0.040153, -0.010059, 0.341575, 0.276205, -0.153545, -0.000429, 0.607686, 0.444528, -0.035515),
    (0.382071, 0.092013, -0.026814, 0.550570, 0.536155, -0.647196, -0.531928, 0.597304, 0.049985, -0.090576, -0.115584, 0.187777, 0.161971, 0.130998, 0.188878, 0.428405, 0.179252, -0.487070, -0.415779, 0.117987, 0.008667, -0.631478, -0.531716, -0.074481, -0.395232, -0.332236, -0.275785, -0.529268, -0.180542, -0.183867, -0.224673, -0.227140, 0.246096, -0.369772, -0.075481, 0.384951, 0.199491, -0.370598, -0.192061, 0.372276, 0.024039, 0.286117, 0.231013, 0.025684, 0.202990, 0.222482, 0.280398, 0.148571),
    (0.052016, 0.220755, 0.290553, 0.159888, 0.438428, 0.129905, 0.183187, 0.344451, 0.462126, 0.378238, 0.314736, 0.372762, -0.238696, 0.035853, 0.021025, -0.360933, -0.319990, -0.165550, -0.195722, -0.277554, -0.428932, 0.008132, -0.002322, -0.309206, -0.337660, -0.052944, -0.088832, -0.320356, -0.325065, -0.262780, -0.289174, -0.413987, 0.003121, 0.079504, 0.156227, -0.107279, -0.128441, 0.625755, 0.574488, 0.002390, 0.177433, 0.432526, 0.478227, 0.295062, 0.180070, 0.424153, 0.310068, 0.348168),
    (-0.279661, -0.264050, -0.099585, -0.222420, -0.050651, 0.424648, 0.378430, -0.130464, -0.106392, -0.417633, -0.339635, 0.024261, 0.651164, 0.428855, 0.450871, 0.638388, 0.158199, -0.123454, -0.210617, 0.098639, 0.094983, -0.385808, -0.281911, -0.045557, 0.287846, 0.162195, 0.123049, 0.362647, 0.297611, 0.287950, 0.273753, 0.160296, 0.613140, 0.376153, 0.358526, 0.569224, -0.075544, -0.203410, -0.155166, -0.079774, -0.198296, 0.101286, -0.037826, -0.180792, -0.460364, -0.187428, -0.179483, -0.591484),
    (-0.110068, -0.006522, -0.051010, 0.138700, -0.136649, 0.047110, 0.042151, -0.018639, 0.026147, 0.137480, -0.138089, -0.090427, 0.079472, -0.032448, -0.005440, -0.092454, 0.089632, -0.126070, -0.114556, 0.015970, -0.032103, -0.142440, 0.083370, 0.030317, 0.091905, -0.070675, 0.077003, -0.013161, 0.002736, -0.109350, -0.050322, -0.086388, -0.078189, -0.130184, -0.071932, -0.040279, -0.142035, 0.029959, 0.073496, -0.009214, -0.059962, -0.056162, -0.003755, -0.044888, -0.050207, 0.028748, -0.019386, 0.044535),
)

FC1_BIAS: tuple[float, ...] = (
    0.567779, 0.437427, -0.627171, -0.140783, -0.104224, -0.226126, -0.080582, -0.192924,
    -0.069846, -0.014304, 0.013380, 0.209370, 0.405375, -0.455073, 0.101191, -0.103900,
)

FC2_WEIGHT: tuple[tuple[float, ...], ...] = (
    (-0.744452, 0.544372, -0.980342, 0.747298, -0.067108, 0.289003, -0.066754, 0.923619, 0.347629, -0.115694, 0.676485, -0.864936, -0.606704, 0.666978, -0.091198, 0.048809),
    (0.869205, -0.713689, -1.736580, 0.966881, -0.075235, -1.396598, 0.486219, 1.308736, -0.537610, -0.601178, 0.276293, -0.207768, 0.742357, 0.425722, -0.883557, 0.019747),
    (-0.465126, 0.991838, -0.426623, -0.046168, -0.004108, -0.130017, -1.492390, -0.893737, 0.783141, 0.303176, 0.370492, 0.135998, -0.746880, -0.759029, 0.108544, -0.076005),
    (-0.186580, -0.059687, 0.588216, -0.659725, -0.027708, 0.072135, -0.575881, -0.944694, 0.047933, 0.294929, -0.736322, 1.217845, 1.008493, 0.267033, -0.176006, -0.150949),
    (-0.197132, 0.539833, -0.733224, -0.399566, 0.082942, 0.553166, -0.431201, -0.427524, -0.332439, 0.423884, 0.454473, -0.019575, -1.711268, -1.000521, 0.218615, 0.203759),
    (-0.226325, 0.205934, 1.515453, -0.356280, -0.208775, 0.070336, -0.623883, -1.439874, -0.246745, 0.387001, -0.485078, 0.387739, 0.909592, 0.407128, 0.020668, -0.229357),
    (0.493377, 0.523884, -0.134194, -1.647887, -0.006315, 0.008508, -1.331403, -1.337732, 0.309971, 0.218799, -1.261389, 0.770246, 0.019041, -0.849159, -0.049510, 0.169802),
    (-0.461043, -0.058543, 0.688392, -0.752487, -0.041477, 0.386340, 0.704788, -0.777180, -1.100999, -0.054927, 0.951896, -0.869828, 0.256950, -0.295462, 0.964235, -0.027891),
    (0.138712, -1.939646, -0.399666, 0.182841, 0.045925, 0.607822, 0.755379, 0.185694, 0.724303, -0.673056, -0.279680, -0.087336, -1.913650, 0.305376, -0.805153, 0.100043),
    (0.364368, -1.037416, 0.026690, 0.310028, -0.016057, -1.162530, 0.854022, 0.596033, -0.107574, -1.040144, -0.245129, -0.777353, 0.482361, -0.031663, 0.530030, 0.241082),
)

FC2_BIAS: tuple[float, ...] = (
    -0.892555, 0.312242, 0.144648, 0.116253, 0.409479,
    -0.173313, 0.272274, 0.189534, -0.202628, 0.027251,
)


@dataclass(frozen=True)
class Classification:
    """The winning class of one inference, with its softmax probability."""

    index: int
    confidence: float
    probabilities: tuple[float, ...]

    def label(self) -> str:
        """Short display name of the predicted class."""
        return CLASS_NAMES[self.index]


def _validated(pixels: Iterable[int]) -> tuple[int, ...]:
    values = tuple(pixels)
    if len(values) != INPUT_PIXELS:
        raise ValueError(f"expected {INPUT_PIXELS} pixels, got {len(values)}")
    for value in values:
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"pixel {value!r} is not a 16-bit RGB565 value")
    return values


def _channels(pixel: int) -> tuple[float, float, float]:
    return (
        ((pixel >> 11) & 0x1F) / 31.0,
        ((pixel >> 5) & 0x3F) / 63.0,
        (pixel & 0x1F) / 31.0,
    )


def pooled_features(pixels: Iterable[int]) -> tuple[float, ...]:
    """Average-pool a row-major 32x32 RGB565 image into 48 features in [-1, 1].

    Features are ordered channel (R, G, B), then pool row, then pool column.
    """
    sums = [0.0] * FEATURE_COUNT
    cells = POOL_SIDE * POOL_SIDE
    for position, pixel in enumerate(_validated(pixels)):
        row, col = divmod(position, INPUT_SIDE)
        cell = (row // POOL_WINDOW) * POOL_SIDE + col // POOL_WINDOW
        for channel, value in enumerate(_channels(pixel)):
            sums[channel * cells + cell] += value
    window_area = POOL_WINDOW * POOL_WINDOW
    return tuple((total / window_area) * 2.0 - 1.0 for total in sums)


def _dense(weights, bias, inputs) -> list[float]:
    return [b + sum(w * x for w, x in zip(row, inputs)) for row, b in zip(weights, bias)]


def classify(pixels: Iterable[int]) -> Classification:
    """Run the network on a 32x32 RGB565 image and return the most likely class."""
    features = pooled_features(pixels)
    hidden = [max(value, 0.0) for value in _dense(FC1_WEIGHT, FC1_BIAS, features)]
    logits = _dense(FC2_WEIGHT, FC2_BIAS, hidden)

    peak = max(logits)
    exps = [math.exp(value - peak) for value in logits]
    total = sum(exps)
    probabilities = tuple(value / total for value in exps)

    best = max(range(len(probabilities)), key=probabilities.__getitem__)
    return Classification(best, probabilities[best], probabilities)